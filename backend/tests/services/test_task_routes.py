"""Task Routes - tests for the authenticated task API and its broadcasts.

Tests cover:
    - 401 + WWW-Authenticate without, with malformed, and with expired tokens
    - CRUD round trip in camelCase, elapsedSeconds not writable via PUT
    - Another owner's task answers 404 and is left untouched
    - POST /time accumulates, negative delta -> 400
    - Each mutation reaches the owner's registered connections exactly once
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from tasksync.core.credentials import issue_token
from tasksync.core.domain_types import OwnerId


# ─── Authentication ──────────────────────────────────────────────

async def test_list_without_token_is_401(client):
    res = await client.get("/api/v1/tasks")
    assert res.status_code == 401
    assert res.headers["www-authenticate"] == "Bearer"
    assert res.json()["error"]["code"] == "MISSING_CREDENTIAL"


async def test_malformed_token_is_401(client):
    res = await client.get(
        "/api/v1/tasks", headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "INVALID_CREDENTIAL"


async def test_expired_token_is_401(client):
    token = issue_token(
        OwnerId(uuid4()), "test-secret",
        now=datetime.now(timezone.utc) - timedelta(days=2),
        expires_in=timedelta(days=1),
    )
    res = await client.get(
        "/api/v1/tasks", headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "TOKEN_EXPIRED"


async def test_mutation_without_token_emits_nothing(client, connect):
    conn = connect(OwnerId(uuid4()))
    res = await client.post("/api/v1/tasks", json={"title": "sneaky"})
    assert res.status_code == 401
    assert conn.received == []


# ─── CRUD ────────────────────────────────────────────────────────

async def test_crud_round_trip(client, signup):
    headers, user = await signup("ada@example.com")

    res = await client.post(
        "/api/v1/tasks", json={"title": "Draft", "orderIndex": 1}, headers=headers,
    )
    assert res.status_code == 201
    created = res.json()
    assert created["status"] == "pending"
    assert created["elapsedSeconds"] == 0
    assert created["ownerId"] == user["id"]
    assert created["orderIndex"] == 1

    res = await client.put(
        f"/api/v1/tasks/{created['id']}",
        json={"status": "ongoing", "title": "Draft v2"},
        headers=headers,
    )
    assert res.status_code == 200
    assert (res.json()["status"], res.json()["title"]) == ("ongoing", "Draft v2")

    listed = (await client.get("/api/v1/tasks", headers=headers)).json()
    assert [t["id"] for t in listed] == [created["id"]]

    res = await client.delete(f"/api/v1/tasks/{created['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert (await client.get("/api/v1/tasks", headers=headers)).json() == []


async def test_create_without_title_is_400(client, signup):
    headers, _ = await signup("ada@example.com")
    res = await client.post("/api/v1/tasks", json={"status": "pending"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_put_ignores_elapsed_seconds(client, signup):
    headers, _ = await signup("ada@example.com")
    task = (await client.post(
        "/api/v1/tasks", json={"title": "Timer"}, headers=headers,
    )).json()
    await client.post(
        f"/api/v1/tasks/{task['id']}/time", json={"deltaSeconds": 12}, headers=headers,
    )
    res = await client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"elapsedSeconds": 0, "title": "Timer"},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["elapsedSeconds"] == 12


async def test_invalid_status_is_400(client, signup):
    headers, _ = await signup("ada@example.com")
    task = (await client.post(
        "/api/v1/tasks", json={"title": "Draft"}, headers=headers,
    )).json()
    res = await client.put(
        f"/api/v1/tasks/{task['id']}", json={"status": "archived"}, headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unknown_task_is_404(client, signup):
    headers, _ = await signup("ada@example.com")
    res = await client.put(
        f"/api/v1/tasks/{uuid4()}", json={"title": "x"}, headers=headers,
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_other_owners_task_is_404_and_untouched(client, signup):
    alice, _ = await signup("alice@example.com")
    mallory, _ = await signup("mallory@example.com")
    task = (await client.post(
        "/api/v1/tasks", json={"title": "private"}, headers=alice,
    )).json()

    url = f"/api/v1/tasks/{task['id']}"
    assert (await client.put(url, json={"title": "x"}, headers=mallory)).status_code == 404
    assert (await client.delete(url, headers=mallory)).status_code == 404
    assert (await client.post(
        f"{url}/time", json={"deltaSeconds": 5}, headers=mallory,
    )).status_code == 404
    assert (await client.get("/api/v1/tasks", headers=mallory)).json() == []

    [stored] = (await client.get("/api/v1/tasks", headers=alice)).json()
    assert stored["title"] == "private"
    assert stored["elapsedSeconds"] == 0


# ─── Time accumulation ───────────────────────────────────────────

async def test_time_accumulates_across_requests(client, signup):
    headers, _ = await signup("ada@example.com")
    task = (await client.post(
        "/api/v1/tasks", json={"title": "Timer"}, headers=headers,
    )).json()
    url = f"/api/v1/tasks/{task['id']}/time"
    await client.post(url, json={"deltaSeconds": 30}, headers=headers)
    res = await client.post(url, json={"deltaSeconds": 12}, headers=headers)
    assert res.status_code == 200
    assert res.json()["elapsedSeconds"] == 42


async def test_negative_delta_is_400(client, signup):
    headers, _ = await signup("ada@example.com")
    task = (await client.post(
        "/api/v1/tasks", json={"title": "Timer"}, headers=headers,
    )).json()
    res = await client.post(
        f"/api/v1/tasks/{task['id']}/time", json={"deltaSeconds": -1}, headers=headers,
    )
    assert res.status_code == 400


# ─── Broadcasts ──────────────────────────────────────────────────

async def test_mutations_reach_owner_connections_once(client, signup, connect):
    headers, user = await signup("ada@example.com")
    _, other = await signup("bob@example.com")
    phone = connect(_owner(user))
    laptop = connect(_owner(user))
    stranger = connect(_owner(other))

    created = (await client.post(
        "/api/v1/tasks", json={"title": "Draft"}, headers=headers,
    )).json()
    updated = (await client.put(
        f"/api/v1/tasks/{created['id']}", json={"status": "completed"}, headers=headers,
    )).json()
    await client.delete(f"/api/v1/tasks/{created['id']}", headers=headers)

    expected = [
        {"type": "taskCreated", "data": created},
        {"type": "taskUpdated", "data": updated},
        {"type": "taskDeleted", "data": created["id"]},
    ]
    assert phone.received == expected
    assert laptop.received == expected
    assert stranger.received == []


async def test_failed_request_broadcasts_nothing(client, signup, connect):
    headers, user = await signup("ada@example.com")
    conn = connect(_owner(user))
    await client.put(f"/api/v1/tasks/{uuid4()}", json={"title": "x"}, headers=headers)
    await client.post("/api/v1/tasks", json={"title": "  "}, headers=headers)
    assert conn.received == []


def _owner(user: dict) -> OwnerId:
    return OwnerId(UUID(user["id"]))
