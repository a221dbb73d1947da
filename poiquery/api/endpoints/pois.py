"""POI management endpoints. Every route here requires an admin caller."""

from typing import List

from fastapi import APIRouter

from poiquery.api.deps import CurrentUserId, Cursor, POIStoreDep
from poiquery.schemas.poi import (
    BulkPOICreate,
    DeleteResponse,
    POICreate,
    POIPage,
    POIResponse,
    POIUpdate,
)

router = APIRouter(prefix="/pois", tags=["POIs"])


@router.post(
    "",
    response_model=POIResponse,
    summary="Add POI",
    description="Store a POI whose coordinates were encrypted by the client.",
)
async def add_poi(
    body: POICreate,
    user_id: CurrentUserId,
    store: POIStoreDep,
) -> POIResponse:
    poi = await store.create(body, user_id)
    return POIResponse.model_validate(poi)


@router.post(
    "/bulk",
    response_model=List[POIResponse],
    summary="Bulk add POIs",
    description="Store many POIs in one transaction; all or none are written.",
)
async def bulk_add_pois(
    body: BulkPOICreate,
    user_id: CurrentUserId,
    store: POIStoreDep,
) -> List[POIResponse]:
    pois = await store.bulk_create(body.pois, user_id)
    return [POIResponse.model_validate(poi) for poi in pois]


@router.get(
    "",
    response_model=POIPage,
    summary="List POIs",
    description="Cursor-paginated listing ordered by id.",
)
async def list_pois(
    user_id: CurrentUserId,
    store: POIStoreDep,
    cursor: Cursor,
) -> POIPage:
    return await store.list_page(user_id, cursor.page_size, cursor.last_doc)


@router.put(
    "/{poi_id}",
    response_model=POIResponse,
    summary="Update POI",
    description="Merge the provided fields into an existing POI.",
)
async def update_poi(
    poi_id: str,
    body: POIUpdate,
    user_id: CurrentUserId,
    store: POIStoreDep,
) -> POIResponse:
    poi = await store.update(poi_id, body, user_id)
    return POIResponse.model_validate(poi)


@router.delete(
    "/{poi_id}",
    response_model=DeleteResponse,
    summary="Delete POI",
)
async def delete_poi(
    poi_id: str,
    user_id: CurrentUserId,
    store: POIStoreDep,
) -> DeleteResponse:
    await store.delete(poi_id, user_id)
    return DeleteResponse(success=True)
