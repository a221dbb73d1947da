"""Async database session management.

This module provides the async SQLAlchemy engine and session
factory for non-blocking database operations. Both are created
lazily so tests and the CLI can point them at another database.
"""

from functools import lru_cache
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from poiquery.core.config import settings


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pooling suited to the backend.

    Args:
        database_url: Async SQLAlchemy URL.
        echo: Log every SQL statement.

    Returns:
        Configured AsyncEngine.
    """
    kwargs: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        kwargs.update(pool_size=5, max_overflow=10)
    return create_async_engine(database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for creating async sessions bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@lru_cache
def get_engine() -> AsyncEngine:
    return build_engine(settings.SQLALCHEMY_DATABASE_URI, echo=settings.DEBUG)


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return build_session_factory(get_engine())


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session.

    This is a FastAPI dependency that yields an async session
    and ensures proper cleanup after the request completes.
    Services commit their own units of work; anything left
    pending when the request fails is rolled back here.

    Yields:
        AsyncSession: SQLAlchemy async session for database operations.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
