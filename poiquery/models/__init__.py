"""Database models. Importing this package registers every table on Base.metadata."""

from poiquery.models.base import Base, TimestampMixin
from poiquery.models.poi import POI
from poiquery.models.search_history import SearchHistory
from poiquery.models.user import User, UserRole

__all__ = ["Base", "TimestampMixin", "POI", "SearchHistory", "User", "UserRole"]
