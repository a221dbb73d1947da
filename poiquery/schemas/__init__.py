"""Pydantic schemas for the HTTP API."""

from poiquery.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from poiquery.schemas.common import CamelModel, MessageResponse
from poiquery.schemas.poi import (
    BulkPOICreate,
    DeleteResponse,
    POICreate,
    POIPage,
    POIResponse,
    POIUpdate,
)
from poiquery.schemas.search import SearchHistoryEntry, SearchQuery, SearchResult

__all__ = [
    "AuthResponse",
    "BulkPOICreate",
    "CamelModel",
    "DeleteResponse",
    "LoginRequest",
    "MessageResponse",
    "POICreate",
    "POIPage",
    "POIResponse",
    "POIUpdate",
    "RegisterRequest",
    "SearchHistoryEntry",
    "SearchQuery",
    "SearchResult",
    "UserResponse",
]
