"""Database initialization tests."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from poiquery.init_db import init_database, seed_admin
from poiquery.models import User
from poiquery.services.database import build_session_factory

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'init.db'}"


async def test_creates_tables_and_seeds_admin(database_url):
    engine = create_async_engine(database_url, poolclass=NullPool)
    try:
        await init_database(
            admin_email="root@example.com",
            admin_password="secret123",
            engine=engine,
        )

        async with build_session_factory(engine)() as session:
            users = list((await session.execute(select(User))).scalars())

        assert [(u.email, u.role) for u in users] == [("root@example.com", "admin")]
    finally:
        await engine.dispose()


async def test_seed_admin_skips_existing_email(database_url):
    engine = create_async_engine(database_url, poolclass=NullPool)
    try:
        await init_database(engine=engine)
        factory = build_session_factory(engine)

        assert await seed_admin(factory, "root@example.com", "secret123") is not None
        assert await seed_admin(factory, "root@example.com", "secret123") is None
    finally:
        await engine.dispose()


async def test_drop_existing_clears_data(database_url):
    engine = create_async_engine(database_url, poolclass=NullPool)
    try:
        await init_database(admin_email="root@example.com", admin_password="secret123", engine=engine)
        await init_database(drop_existing=True, engine=engine)

        async with build_session_factory(engine)() as session:
            assert list((await session.execute(select(User))).scalars()) == []
    finally:
        await engine.dispose()
