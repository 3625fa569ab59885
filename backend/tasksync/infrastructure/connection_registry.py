"""Connection Registry - live persistent connections grouped by owner identity.

Invariants:
    - A connection belongs to exactly one group, named by its owner_id
    - register is idempotent per connection; unregister is a no-op when absent
    - Empty groups are dropped, so a disconnected owner leaves nothing behind
    - broadcast_to only ever reads the group of the owner it was given
    - One failing connection never aborts delivery to its siblings

Design Decisions:
    - Confined to the asyncio event loop: no method awaits, so each call runs to
      completion without interleaving and no lock is needed
    - broadcast_to iterates a snapshot; connections joining mid-broadcast may miss
      that one event
    - Delivery is Connection.deliver (non-blocking enqueue); slow sockets are the
      connection's problem, not the registry's
"""

import logging

from tasksync.core.domain_types import ConnectionId, OwnerId
from tasksync.core.repository_protocols import Connection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps owner_id -> {connection_id: connection}."""

    def __init__(self) -> None:
        self._groups: dict[OwnerId, dict[ConnectionId, Connection]] = {}
        self._owner_of: dict[ConnectionId, OwnerId] = {}

    def register(self, owner_id: OwnerId, connection: Connection) -> None:
        if connection.owner_id != owner_id:
            raise ValueError(
                f"Connection {connection.id} is bound to a different owner",
            )
        if connection.id in self._owner_of:
            return
        self._groups.setdefault(owner_id, {})[connection.id] = connection
        self._owner_of[connection.id] = owner_id
        logger.info(
            "Connection registered",
            extra={"owner_id": owner_id, "connection_id": connection.id},
        )

    def unregister(self, connection: Connection) -> bool:
        owner_id = self._owner_of.pop(connection.id, None)
        if owner_id is None:
            return False
        group = self._groups.get(owner_id, {})
        group.pop(connection.id, None)
        if not group:
            self._groups.pop(owner_id, None)
        logger.info(
            "Connection unregistered",
            extra={"owner_id": owner_id, "connection_id": connection.id},
        )
        return True

    def broadcast_to(self, owner_id: OwnerId, message: dict) -> int:
        """Deliver message to every connection of owner_id. Returns delivered count."""
        recipients = list(self._groups.get(owner_id, {}).values())
        delivered = 0
        for connection in recipients:
            try:
                connection.deliver(message)
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"Delivery failed: {e!r}",
                    extra={"owner_id": owner_id, "connection_id": connection.id},
                )
        return delivered

    def connection_count(self, owner_id: OwnerId | None = None) -> int:
        if owner_id is None:
            return len(self._owner_of)
        return len(self._groups.get(owner_id, {}))

    def owners(self) -> list[OwnerId]:
        return list(self._groups)

    def is_registered(self, connection: Connection) -> bool:
        return connection.id in self._owner_of
