"""Aggregate router for everything mounted under API_PREFIX."""

from fastapi import APIRouter

from poiquery.api.endpoints import auth, pois, search

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(pois.router)
api_router.include_router(search.router)
