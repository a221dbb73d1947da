"""Alembic migration runner for the poiquery schema.

Both modes take the database URL from poiquery settings, so
``DATABASE_URL`` or the ``POSTGRES_*`` variables pick the target.
Online mode drives the async engine through ``run_sync``.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.pool import NullPool
from sqlalchemy.ext.asyncio import create_async_engine

from poiquery.core.config import settings
from poiquery.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

DATABASE_URL = settings.SQLALCHEMY_DATABASE_URI
metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(target_metadata=metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    # ALTER TABLE on SQLite only works through batch operations
    _configure(
        connection=connection,
        render_as_batch=connection.dialect.name == "sqlite",
    )


async def migrate_online(url: str) -> None:
    """Apply pending revisions against a live database.

    Args:
        url: Async SQLAlchemy URL of the target database.
    """
    engine = create_async_engine(url, poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(migrate_online(DATABASE_URL))
