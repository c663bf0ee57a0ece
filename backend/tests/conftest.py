"""Pytest configuration and fixtures for EasyRent tests.

Provides a throwaway database plus in-memory collaborators (storage,
persistence, notifier, Redis) so the wizard core and the API run without
Postgres or Redis.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from app import models  # noqa: F401  registers every table on Base.metadata
from app.auth.jwt import create_access_token, create_invitee_token
from app.database import Base, get_db
from app.main import app
from app.services.notifications import get_notifier
from app.services.storage import get_storage
from app.utils import cache
from app.wizard.collaborators import Principal

from fakes import FakeNotifier, FakePersistence, FakeRedis, FakeStorage


# ── Test Database Setup ──────────────────────────────────────────

# In-memory SQLite by default; point at a Postgres database to run the
# same tests against the production dialect.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _enable_sqlite_savepoints(engine) -> None:
    """SAVEPOINT and foreign keys for aiosqlite (the driver's own BEGIN is disabled)."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh schema per test."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
        _enable_sqlite_savepoints(engine)
    else:
        engine = create_async_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def db_client(
    db_session, fake_redis, storage, notifier
) -> AsyncGenerator[AsyncClient, None]:
    """API client on the test database; storage and email are in-memory."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def landlord() -> Principal:
    return Principal(id="landlord-1", role="landlord", email="owner@example.com")


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    """Installs one FakeRedis as both the text and the binary client."""
    client = FakeRedis()
    monkeypatch.setattr(cache, "_redis_client", client)
    monkeypatch.setattr(cache, "_binary_client", client)
    return client


@pytest_asyncio.fixture
async def client(fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """API client with the database dependency stubbed out."""

    async def override_get_db():
        yield None

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def landlord_headers(landlord: Principal) -> dict:
    token = create_access_token(landlord.id, role="landlord", email=landlord.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def invitee_headers() -> dict:
    token = create_invitee_token("invite-1", "tenant@example.com")
    return {"Authorization": f"Bearer {token}"}


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: API tests through the ASGI app")
    config.addinivalue_line("markers", "cache: Redis cache tests")
