"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness check sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (partial unique index and RETURNING both work on SQLite >= 3.35)
    - Schema from Base.metadata.create_all, not alembic: throwaway database
    - Seed helpers go through the HTTP API so rows look exactly like production rows
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.db.session import (
    create_engine, create_schema, create_session_factory, drop_schema,
)
from app.infrastructure.database import get_db, DatabaseSessionManager
import app.infrastructure.database as db_module
from app.main import app
from tests.factories import location_payload, request_payload, trip_payload


@pytest.fixture
async def test_engine():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    yield engine
    await drop_schema(engine)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Seed fixtures ───────────────────────────────────────────────

@pytest.fixture
async def seed_location(client):
    res = await client.post("/api/v1/locations", json=location_payload())
    assert res.status_code == 201
    return res.json()


@pytest.fixture
async def seed_trip(client, seed_location):
    res = await client.post("/api/v1/trips", json=trip_payload(seed_location["id"]))
    assert res.status_code == 201
    return res.json()


@pytest.fixture
async def seed_request(client, seed_trip):
    res = await client.post("/api/v1/requests", json=request_payload(seed_trip["id"]))
    assert res.status_code == 201
    return res.json()
