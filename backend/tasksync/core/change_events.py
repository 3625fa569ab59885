"""Change Events - ephemeral notifications describing one completed mutation.

Invariants:
    - Exactly one event per successful mutation, built AFTER the store confirmed it
    - owner_id is copied from the persisted record, never from request input
    - Never persisted; consumed immediately by the broadcast router

Design Decisions:
    - Deleted events carry the bare id string as data: the record no longer
      exists to describe, and clients drop it from their board by id
"""

from dataclasses import dataclass, field

from tasksync.core.domain_types import ChangeKind, OwnerId, TaskId
from tasksync.core.task_record import TaskRecord


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    owner_id: OwnerId
    payload: dict | str = field(default_factory=dict)

    def to_wire(self) -> dict:
        """Server->client message: {"type": "taskCreated", "data": {...}}."""
        return {"type": self.kind.event_name, "data": self.payload}


def task_created(record: TaskRecord) -> ChangeEvent:
    return ChangeEvent(ChangeKind.CREATED, record.owner_id, record.to_payload())


def task_updated(record: TaskRecord) -> ChangeEvent:
    return ChangeEvent(ChangeKind.UPDATED, record.owner_id, record.to_payload())


def task_deleted(owner_id: OwnerId, task_id: TaskId) -> ChangeEvent:
    return ChangeEvent(ChangeKind.DELETED, owner_id, str(task_id))
