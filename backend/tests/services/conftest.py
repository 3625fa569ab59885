"""Service test fixtures - async DB, connection registry with fake sessions, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Every test gets a fresh ConnectionRegistry, installed on app.state for route tests
    - get_db dependency overridden to use test DB session

Design Decisions:
    - connect() registers FakeConnections (tests/services/fake_connection.py)
    - SQLite in-memory: PostgreSQL-specific features not exercised here
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from tasksync.core.domain_types import OwnerId
from tasksync.db.base import Base
from tasksync.infrastructure.connection_registry import ConnectionRegistry
from tasksync.infrastructure.database import get_db
from tasksync.infrastructure.repositories import SqlTaskRepository
from tasksync.main import app
from tasksync.services.broadcast_router import BroadcastRouter
from tasksync.services.task_service import TaskService
import tasksync.models  # noqa: F401
from tests.services.fake_connection import FakeConnection


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def connect(registry):
    """Register a FakeConnection for an owner: connect(owner_id, fail=False)."""
    def _connect(owner_id: OwnerId, fail: bool = False) -> FakeConnection:
        connection = FakeConnection(owner_id, fail=fail)
        registry.register(owner_id, connection)
        return connection
    return _connect


@pytest.fixture
def owner_a() -> OwnerId:
    return OwnerId(uuid4())


@pytest.fixture
def owner_b() -> OwnerId:
    return OwnerId(uuid4())


@pytest.fixture
def task_service(test_db, registry):
    return TaskService(SqlTaskRepository(test_db), BroadcastRouter(registry))


@pytest.fixture
async def client(test_session_factory, registry):
    """FastAPI test client with DB dependency and registry overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    original_registry = app.state.connection_registry
    app.state.connection_registry = registry

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    app.state.connection_registry = original_registry


@pytest.fixture
def signup(client):
    """Register an account via the API; returns (auth headers, user dict)."""
    async def _signup(email: str, password: str = "s3cret-pass", name: str | None = None):
        res = await client.post(
            "/api/v1/register",
            json={"name": name, "email": email, "password": password},
        )
        assert res.status_code == 200, res.text
        body = res.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]
    return _signup
