"""Search history model.

One row per search, holding the query exactly as received (ciphertext).
Rows are written for audit only and are never replayed.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from poiquery.models.base import Base, generate_uuid, utcnow


class SearchHistory(Base):
    """An audit record of a search query.

    Attributes:
        id: Primary key (UUID string).
        user_id: Id of the caller that ran the search.
        query: The encrypted query payload as JSON.
        timestamp: When the search was received.
    """

    __tablename__ = "search_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    query: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_search_history_user_timestamp", "user_id", "timestamp"),
    )
