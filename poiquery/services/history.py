"""Search History Recorder.

Appends every search query (still encrypted) with the caller id and a
timestamp. Writing history is best-effort: a failure is logged and the
search carries on. Each write uses its own session so a failed insert
cannot poison the request's session.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poiquery.models.search_history import SearchHistory
from poiquery.schemas.search import SearchQuery

logger = logging.getLogger(__name__)


class SearchHistoryRecorder:
    """Writes and reads search history rows.

    Attributes:
        session_factory: Factory for short-lived sessions.
        limit: Maximum number of entries returned per user.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        limit: int = 50,
    ) -> None:
        self.session_factory = session_factory
        self.limit = limit

    async def record(self, user_id: str, query: SearchQuery) -> Optional[str]:
        """Store the raw query for user_id.

        Returns:
            The new entry id, or None when the write failed.
        """
        try:
            async with self.session_factory() as session:
                entry = SearchHistory(
                    user_id=user_id,
                    query=query.model_dump(by_alias=True, exclude_none=True),
                )
                session.add(entry)
                await session.commit()
                return entry.id
        except Exception as e:
            logger.warning(f"Could not record search history for user {user_id}: {e}")
            return None

    async def list_for_user(self, user_id: str) -> List[SearchHistory]:
        """Most recent entries for user_id, newest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(SearchHistory)
                .where(SearchHistory.user_id == user_id)
                .order_by(SearchHistory.timestamp.desc())
                .limit(self.limit)
            )
            return list(result.scalars())
