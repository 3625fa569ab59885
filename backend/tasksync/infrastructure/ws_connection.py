"""Queued WebSocket Connection - one live session with its own outbound queue.

Invariants:
    - deliver() never awaits: it enqueues or raises, so fan-out cannot block
    - Messages leave in enqueue order (one writer task per connection)
    - A full queue marks the connection lagging and stops it; the client reconnects
      and reloads its board from GET /tasks
    - serve() returns exactly one stop reason and leaves no task running

Design Decisions:
    - Bounded asyncio.Queue per connection: a slow socket only delays itself
    - Client frames are only read for ping and for disconnect detection;
      credentials are never re-checked per message
"""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum

from fastapi import WebSocket, WebSocketDisconnect

from tasksync.core.domain_types import ConnectionId, OwnerId

logger = logging.getLogger(__name__)


class StopReason(str, Enum):
    DISCONNECTED = "disconnected"
    SEND_FAILED = "send_failed"
    LAGGING = "lagging"
    EXPIRED = "expired"


class ConnectionClosedError(RuntimeError):
    """deliver() called on a connection that has stopped."""


class QueuedConnection:
    """Connection protocol implementation over a FastAPI WebSocket."""

    def __init__(
        self, websocket: WebSocket, owner_id: OwnerId, queue_size: int = 256,
    ):
        self.id = ConnectionId(uuid.uuid4().hex)
        self.owner_id = owner_id
        self.websocket = websocket
        self._queue: asyncio.Queue[dict] = asyncio.Queue(maxsize=queue_size)
        self._stopped = asyncio.Event()
        self._stop_reason: StopReason | None = None

    @property
    def closed(self) -> bool:
        return self._stopped.is_set()

    def deliver(self, message: dict) -> None:
        if self.closed:
            raise ConnectionClosedError(f"Connection {self.id} is closed")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self._stop(StopReason.LAGGING)
            raise

    def _stop(self, reason: StopReason) -> None:
        if not self.closed:
            self._stop_reason = reason
            self._stopped.set()

    async def serve(self, expires_at: datetime | None = None) -> StopReason:
        """Pump outbound messages and watch the socket until something ends the session."""
        watchers = {
            asyncio.create_task(self._write_loop()): StopReason.SEND_FAILED,
            asyncio.create_task(self._read_loop()): StopReason.DISCONNECTED,
            asyncio.create_task(self._stopped.wait()): StopReason.LAGGING,
        }
        if expires_at is not None:
            watchers[asyncio.create_task(_sleep_until(expires_at))] = StopReason.EXPIRED

        done, pending = await asyncio.wait(
            watchers, return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        first = next(iter(done))
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.warning(
                    f"Connection task failed: {task.exception()!r}",
                    extra={"connection_id": self.id, "owner_id": self.owner_id},
                )
        self._stop(watchers[first])
        return self._stop_reason

    async def close(self, code: int, event: dict | None = None) -> None:
        """Best-effort final frame and close; the peer may already be gone."""
        try:
            if event is not None:
                await self.websocket.send_json(event)
            await self.websocket.close(code=code)
        except Exception as e:
            logger.debug(
                f"Close on dead socket: {e!r}", extra={"connection_id": self.id},
            )

    async def _write_loop(self) -> None:
        while True:
            message = await self._queue.get()
            await self.websocket.send_json(message)

    async def _read_loop(self) -> None:
        while True:
            try:
                raw = await self.websocket.receive_text()
            except WebSocketDisconnect:
                return
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if isinstance(frame, dict) and frame.get("type") == "ping":
                self.deliver({"type": "pong"})


async def _sleep_until(moment: datetime) -> None:
    remaining = (moment - datetime.now(timezone.utc)).total_seconds()
    await asyncio.sleep(max(remaining, 0))
