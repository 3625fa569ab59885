"""Health & Readiness Probes - tests for liveness and readiness endpoints.

Tests cover:
    - Liveness reports live connection count
    - Readiness 503 without a database, 200 with a reachable one
"""

from tasksync.infrastructure import database
from tasksync.infrastructure.database import DatabaseSessionManager


async def test_liveness_counts_connections(client, connect, owner_a, owner_b):
    connect(owner_a)
    connect(owner_b)
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
    assert res.json()["live_connections"] == 2


async def test_readiness_without_database_is_503(client, monkeypatch):
    monkeypatch.setattr(database, "db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"


async def test_readiness_with_database_is_ready(client, monkeypatch):
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    monkeypatch.setattr(database, "db_manager", manager)
    try:
        res = await client.get("/api/v1/health/ready")
    finally:
        await manager.dispose()
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"
