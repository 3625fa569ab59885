"""Task Stream - Connection Gateway: authenticated WebSocket joined to the owner's group.

Invariants:
    - Credentials are verified ONCE, at handshake, through api.dependencies.authenticate
    - A failed handshake gets one error event and a 1008 close; it is never registered
    - Registration happens only after accept; unregistration runs in `finally`, so
      clean closes, abrupt drops, send failures, lag, expiry and server
      cancellation all remove the connection
    - The session ends when its credential expires (TOKEN_EXPIRED, 1008)

Design Decisions:
    - Token from `?token=` (browser WebSocket API cannot set headers) or
      `Authorization: Bearer`
"""

import logging

from fastapi import APIRouter, Depends, Query, WebSocket, status

from tasksync.api.dependencies import authenticate
from tasksync.config import Settings, get_settings
from tasksync.core.credentials import extract_bearer_token
from tasksync.core.errors import InvalidCredentialError
from tasksync.infrastructure.connection_registry import ConnectionRegistry
from tasksync.infrastructure.ws_connection import QueuedConnection, StopReason

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])

_LAGGING_EVENT = {
    "type": "error",
    "data": {
        "code": "CONNECTION_LAGGING",
        "message": "Too many undelivered updates; reconnect and reload tasks",
        "severity": "warning",
    },
}


@router.websocket("/stream")
async def task_stream(
    websocket: WebSocket,
    token: str | None = Query(None),
    settings: Settings = Depends(get_settings),
):
    raw_token = token or extract_bearer_token(websocket.headers.get("authorization"))
    try:
        credential = authenticate(raw_token, settings)
    except InvalidCredentialError as exc:
        logger.info(
            f"Handshake rejected: {exc.message}", extra={"error_code": exc.code},
        )
        await websocket.accept()
        await websocket.send_json(exc.to_ws_event())
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    registry: ConnectionRegistry = websocket.app.state.connection_registry
    await websocket.accept()
    connection = QueuedConnection(
        websocket, credential.owner_id, settings.connection_queue_size,
    )
    registry.register(credential.owner_id, connection)
    try:
        connection.deliver({
            "type": "ready", "data": {"ownerId": str(credential.owner_id)},
        })
        reason = await connection.serve(expires_at=credential.expires_at)
    finally:
        registry.unregister(connection)

    logger.info(
        f"Connection closed ({reason.value})",
        extra={"connection_id": connection.id, "owner_id": connection.owner_id},
    )
    if reason is StopReason.EXPIRED:
        expired = InvalidCredentialError("Token expired", "TOKEN_EXPIRED")
        await connection.close(status.WS_1008_POLICY_VIOLATION, expired.to_ws_event())
    elif reason is StopReason.LAGGING:
        await connection.close(status.WS_1013_TRY_AGAIN_LATER, _LAGGING_EVENT)
    elif reason is StopReason.SEND_FAILED:
        await connection.close(status.WS_1011_INTERNAL_ERROR)
