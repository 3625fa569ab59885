"""Broadcast Router - hands change events to the owner's connection group.

Invariants:
    - An event goes to registry group event.owner_id and nowhere else
    - publish is synchronous: events leave in the order the task service
      finished persisting them, so one owner's sessions see no reordering
    - Delivery failures never propagate back into the mutation that caused them
"""

import logging

from tasksync.core.change_events import ChangeEvent
from tasksync.infrastructure.connection_registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class BroadcastRouter:

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def publish(self, event: ChangeEvent) -> int:
        delivered = self.registry.broadcast_to(event.owner_id, event.to_wire())
        logger.debug(
            "Change event published",
            extra={
                "owner_id": event.owner_id,
                "event_kind": event.kind.value,
                "recipients": delivered,
            },
        )
        return delivered
