"""Queued Connection & Stream Gateway - tests for slow, broken and departing sessions.

Tests cover:
    - A full queue raises QueueFull, marks the connection stopped, refuses later frames
    - A stalled socket ends serve() with LAGGING while siblings get every broadcast
    - Gateway closes a lagging session with 1013 + CONNECTION_LAGGING and unregisters it
    - Gateway closes with 1011 when a send fails, and unregisters
    - Client disconnect unregisters without a close frame
    - A handshake without a token is never registered
"""

import asyncio

import pytest

from tasksync.api.routes.task_stream import task_stream
from tasksync.config import Settings
from tasksync.core.credentials import issue_token
from tasksync.infrastructure.ws_connection import (
    ConnectionClosedError, QueuedConnection, StopReason,
)
from tests.services.fake_connection import StubWebSocket


@pytest.fixture
def settings() -> Settings:
    return Settings(connection_queue_size=2)


async def _until(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


def _open_stream(ws: StubWebSocket, owner_id, settings: Settings) -> asyncio.Task:
    token = issue_token(owner_id, settings.jwt_secret)
    return asyncio.create_task(task_stream(ws, token=token, settings=settings))


# ─── QueuedConnection ────────────────────────────────────────────

async def test_full_queue_stops_connection(registry, owner_a):
    conn = QueuedConnection(StubWebSocket(registry), owner_a, queue_size=2)
    conn.deliver({"type": "a"})
    conn.deliver({"type": "b"})
    with pytest.raises(asyncio.QueueFull):
        conn.deliver({"type": "c"})
    assert conn.closed
    with pytest.raises(ConnectionClosedError):
        conn.deliver({"type": "d"})


async def test_stalled_socket_lags_without_hurting_siblings(registry, connect, owner_a):
    slow = QueuedConnection(StubWebSocket(registry, stall=True), owner_a, queue_size=2)
    registry.register(owner_a, slow)
    sibling = connect(owner_a)
    serving = asyncio.create_task(slow.serve())

    for i in range(6):
        registry.broadcast_to(owner_a, {"type": "taskUpdated", "data": {"n": i}})

    assert await asyncio.wait_for(serving, timeout=1) is StopReason.LAGGING
    assert [m["data"]["n"] for m in sibling.received] == list(range(6))


# ─── Stream gateway ──────────────────────────────────────────────

async def test_gateway_closes_lagging_session_with_1013(
    registry, connect, owner_a, settings,
):
    ws = StubWebSocket(registry, stall=True)
    sibling = connect(owner_a)
    gateway = _open_stream(ws, owner_a, settings)
    await _until(lambda: registry.connection_count(owner_a) == 2)

    for i in range(6):
        registry.broadcast_to(owner_a, {"type": "taskUpdated", "data": {"n": i}})
    await asyncio.wait_for(gateway, timeout=1)

    assert ws.close_code == 1013
    assert ws.sent[-1]["data"]["code"] == "CONNECTION_LAGGING"
    assert registry.connection_count(owner_a) == 1
    assert len(sibling.received) == 6


async def test_gateway_closes_with_1011_when_send_fails(registry, owner_a, settings):
    ws = StubWebSocket(registry, fail_sends=True)
    await asyncio.wait_for(_open_stream(ws, owner_a, settings), timeout=1)
    assert ws.close_code == 1011
    assert registry.connection_count() == 0


async def test_gateway_unregisters_on_client_disconnect(registry, owner_a, settings):
    ws = StubWebSocket(registry)
    gateway = _open_stream(ws, owner_a, settings)
    await _until(lambda: ws.sent)
    assert ws.sent[0] == {"type": "ready", "data": {"ownerId": str(owner_a)}}
    assert registry.connection_count(owner_a) == 1

    ws.disconnect()
    await asyncio.wait_for(gateway, timeout=1)
    assert registry.connection_count() == 0
    assert ws.close_code is None


async def test_gateway_rejects_missing_token(registry, settings):
    ws = StubWebSocket(registry)
    await task_stream(ws, token=None, settings=settings)
    assert ws.accepted
    assert [m["data"]["code"] for m in ws.sent] == ["MISSING_CREDENTIAL"]
    assert ws.close_code == 1008
    assert registry.connection_count() == 0
