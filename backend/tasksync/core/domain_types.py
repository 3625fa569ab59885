"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - OwnerId and TaskId wrap UUIDs; never pass a bare UUID between layers
    - TaskStatus is the only set of statuses that may be persisted
    - ChangeKind maps 1:1 onto broadcast event names

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

OwnerId = NewType("OwnerId", UUID)
TaskId = NewType("TaskId", UUID)
ConnectionId = NewType("ConnectionId", str)


# ─── Enums ───────────────────────────────────────────────────────

class TaskStatus(str, Enum):
    """Board columns. Every status is reachable from every other."""
    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class ChangeKind(str, Enum):
    """Kinds of mutation that produce a change event."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    @property
    def event_name(self) -> str:
        return {
            ChangeKind.CREATED: "taskCreated",
            ChangeKind.UPDATED: "taskUpdated",
            ChangeKind.DELETED: "taskDeleted",
        }[self]
