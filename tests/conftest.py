"""
Shared fixtures and configuration for the poiquery test suite.

Environment variables are set before poiquery is imported so the cached
settings pick them up: fast bcrypt, no rate limiting and a fixed JWT key.
Every API test runs against its own temporary SQLite database.
"""

import asyncio
import os

os.environ["APP_ENV"] = "testing"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENCRYPTION_PASSPHRASE"] = "your-private-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./poiquery-test.db"

from typing import Any, Dict, Generator, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from poiquery.main import app  # noqa: E402
from poiquery.models import Base  # noqa: E402
from poiquery.services.cipher import CoordinateCipher  # noqa: E402
from poiquery.services.database import (  # noqa: E402
    build_session_factory,
    get_db,
    get_session_factory,
)

DEFAULT_PASSWORD = "secret123"


# =============================================================================
# PYTEST HOOKS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

async def _create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def engine(tmp_path) -> Generator[AsyncEngine, None, None]:
    """
    Async engine on a fresh SQLite file.

    NullPool opens a connection per session, so the engine can be used
    from the TestClient's event loop after tables were created here.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    asyncio.run(_create_tables(engine))
    yield engine
    asyncio.run(engine.dispose())


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def client(engine) -> Generator[TestClient, None, None]:
    """TestClient with database dependencies pointed at the test engine."""
    session_factory = build_session_factory(engine)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def register_user(
    client: TestClient,
    email: str,
    role: str = "user",
    password: str = DEFAULT_PASSWORD,
) -> Tuple[str, Dict[str, Any]]:
    """Register through the API and return (token, user)."""
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "role": role},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    return body["token"], body["user"]


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Callable registering a user: register(email, role="user") -> (headers, user)."""

    def _register(email: str, role: str = "user") -> Tuple[Dict[str, str], Dict[str, Any]]:
        token, user = register_user(client, email, role=role)
        return bearer(token), user

    return _register


@pytest.fixture
def admin(client) -> Tuple[Dict[str, str], Dict[str, Any]]:
    """(headers, user) for a registered admin."""
    token, user = register_user(client, "admin@example.com", role="admin")
    return bearer(token), user


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    return admin[0]


@pytest.fixture
def user_headers(client) -> Dict[str, str]:
    token, _ = register_user(client, "user@example.com")
    return bearer(token)


# =============================================================================
# DATA FIXTURES
# =============================================================================

@pytest.fixture
def cipher() -> CoordinateCipher:
    return CoordinateCipher("your-private-key")


@pytest.fixture
def make_poi(cipher):
    """Factory for POI request bodies with encrypted coordinates."""

    def _make(
        lat: float,
        lng: float,
        name: str = "Test POI",
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        encrypted_lat, encrypted_lng = cipher.encrypt(lat, lng)
        payload: Dict[str, Any] = {
            "encryptedLat": encrypted_lat,
            "encryptedLng": encrypted_lng,
            "name": name,
        }
        if description is not None:
            payload["description"] = description
        if category is not None:
            payload["category"] = category
        return payload

    return _make


@pytest.fixture
def make_query(cipher):
    """Factory for encrypted search bodies."""

    def _make(lat: float, lng: float, radius: Optional[float] = None) -> Dict[str, Any]:
        encrypted_lat, encrypted_lng = cipher.encrypt(lat, lng)
        query = {"encryptedLat": encrypted_lat, "encryptedLng": encrypted_lng}
        if radius is not None:
            query["encryptedRadius"] = cipher.encrypt_scalar(radius)
        return query

    return _make
