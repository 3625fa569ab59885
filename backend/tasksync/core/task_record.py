"""Task Record - immutable snapshot of one persisted task.

Invariants:
    - Built only from a row the store has durably written (never from client input)
    - to_payload() is the single wire form, used by HTTP responses AND broadcasts,
      so the originating session and its siblings see identical data
"""

from dataclasses import dataclass
from datetime import datetime

from tasksync.core.domain_types import OwnerId, TaskId, TaskStatus


def _iso(value: datetime | None) -> str | None:
    """ISO-8601, UTC written as `Z` the way pydantic serializes it."""
    if value is None:
        return None
    text = value.isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text


@dataclass(frozen=True)
class TaskRecord:
    id: TaskId
    owner_id: OwnerId
    title: str
    status: TaskStatus
    description: str | None = None
    order_index: int | None = None
    due_date: datetime | None = None
    elapsed_seconds: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_payload(self) -> dict:
        """camelCase JSON-safe dict."""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "ownerId": str(self.owner_id),
            "orderIndex": self.order_index,
            "dueDate": _iso(self.due_date),
            "elapsedSeconds": self.elapsed_seconds,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
