"""Live-app fixtures - the real app over a file-backed SQLite DB, driven by Starlette's TestClient.

Invariants:
    - Lifespan runs, so the production get_db and db_manager are exercised
    - Every test gets a fresh database file and a fresh ConnectionRegistry
    - Settings cache is cleared on entry and exit so DATABASE_URL takes effect

Design Decisions:
    - TestClient over httpx.ASGITransport: only it speaks the WebSocket protocol
    - Tests here are sync; the app runs on the TestClient's own event loop
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine

from tasksync.config import get_settings
from tasksync.db.base import Base
from tasksync.infrastructure.connection_registry import ConnectionRegistry
from tasksync.main import app
import tasksync.models  # noqa: F401


async def _create_schema(url: str) -> None:
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@pytest.fixture
def live_registry():
    return ConnectionRegistry()


@pytest.fixture
def live_client(tmp_path, monkeypatch, live_registry):
    url = f"sqlite+aiosqlite:///{tmp_path / 'live.db'}"
    asyncio.run(_create_schema(url))
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()

    original_registry = app.state.connection_registry
    app.state.connection_registry = live_registry
    with TestClient(app) as client:
        yield client
    app.state.connection_registry = original_registry
    get_settings.cache_clear()


@pytest.fixture
def account(live_client):
    """Register an account: account(email) -> (token, user dict)."""
    def _account(email: str, password: str = "s3cret-pass"):
        res = live_client.post(
            "/api/v1/register", json={"email": email, "password": password},
        )
        assert res.status_code == 200, res.text
        return res.json()["token"], res.json()["user"]
    return _account
