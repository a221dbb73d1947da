"""Encrypted radius search and the caller's search history."""

from typing import List

from fastapi import APIRouter

from poiquery.api.deps import CurrentUserId, HistoryRecorderDep, SearchServiceDep
from poiquery.schemas.search import SearchHistoryEntry, SearchQuery, SearchResult

router = APIRouter(prefix="/search", tags=["Search"])


@router.post(
    "",
    response_model=List[SearchResult],
    summary="Search POIs",
    description=(
        "Return POIs within the encrypted radius (meters) of the encrypted "
        "center, nearest first. Each result carries its distance in kilometers."
    ),
)
async def search_pois(
    body: SearchQuery,
    user_id: CurrentUserId,
    search: SearchServiceDep,
) -> List[SearchResult]:
    return await search.search(body, user_id)


@router.get(
    "/history",
    response_model=List[SearchHistoryEntry],
    summary="Search history",
    description="The caller's most recent searches, newest first.",
)
async def search_history(
    user_id: CurrentUserId,
    history: HistoryRecorderDep,
) -> List[SearchHistoryEntry]:
    entries = await history.list_for_user(user_id)
    return [SearchHistoryEntry.model_validate(entry) for entry in entries]
