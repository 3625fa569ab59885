"""Task Service - owner-scoped task operations that persist, then broadcast.

Invariants:
    - Every operation takes an already-verified OwnerId; never a raw token
    - Order per mutation: validate -> persist -> build ONE ChangeEvent -> publish -> return
    - Validation errors and ResourceNotFoundError are raised before any event exists
    - A storage failure propagates as DatabaseError; nothing is published, nothing retried
    - No TaskRecord is cached beyond a single call

Design Decisions:
    - Status moves: any of pending/ongoing/completed to any other; update_task
      validates the target status only
    - Timer: the caller measures a start/stop interval and submits the delta;
      the service holds no "timer running" state across disconnects. Retrying
      is only safe if the caller submits each delta at most once
    - Originating session reconciles from the return value; it is not excluded
      from the broadcast
"""

import logging

from tasksync.core import change_events
from tasksync.core.domain_types import OwnerId, TaskId
from tasksync.core.errors import ErrorContext, ResourceNotFoundError
from tasksync.core.repository_protocols import TaskRepository
from tasksync.core.task_record import TaskRecord
from tasksync.core.task_rules import (
    normalize_new_task, normalize_patch, validate_delta,
)
from tasksync.services.broadcast_router import BroadcastRouter

logger = logging.getLogger(__name__)


class TaskService:
    """CRUD, status moves and time accumulation for one request's repository."""

    def __init__(self, repository: TaskRepository, router: BroadcastRouter):
        self.repository = repository
        self.router = router

    async def list_tasks(self, owner_id: OwnerId) -> list[TaskRecord]:
        """All tasks for owner, in creation order. Empty list when none."""
        return await self.repository.list_by_owner(owner_id)

    async def create_task(self, owner_id: OwnerId, fields: dict) -> TaskRecord:
        normalized = normalize_new_task(fields)
        record = await self.repository.create(owner_id, normalized)
        self.router.publish(change_events.task_created(record))
        logger.info(
            "Task created",
            extra={"owner_id": owner_id, "task_id": record.id},
        )
        return record

    async def update_task(
        self, owner_id: OwnerId, task_id: TaskId, patch: dict,
    ) -> TaskRecord:
        normalized = normalize_patch(patch)
        record = await self.repository.update(owner_id, task_id, normalized)
        if record is None:
            raise _not_found(owner_id, task_id)
        self.router.publish(change_events.task_updated(record))
        logger.info(
            "Task updated",
            extra={"owner_id": owner_id, "task_id": task_id},
        )
        return record

    async def delete_task(self, owner_id: OwnerId, task_id: TaskId) -> TaskId:
        deleted = await self.repository.delete(owner_id, task_id)
        if not deleted:
            raise _not_found(owner_id, task_id)
        self.router.publish(change_events.task_deleted(owner_id, task_id))
        logger.info(
            "Task deleted",
            extra={"owner_id": owner_id, "task_id": task_id},
        )
        return task_id

    async def accumulate_time(
        self, owner_id: OwnerId, task_id: TaskId, delta_seconds: int,
    ) -> TaskRecord:
        delta = validate_delta(delta_seconds)
        record = await self.repository.add_elapsed(owner_id, task_id, delta)
        if record is None:
            raise _not_found(owner_id, task_id)
        self.router.publish(change_events.task_updated(record))
        logger.info(
            f"Time accumulated (+{delta}s)",
            extra={"owner_id": owner_id, "task_id": task_id},
        )
        return record


def _not_found(owner_id: OwnerId, task_id: TaskId) -> ResourceNotFoundError:
    return ResourceNotFoundError(
        "Task", str(task_id),
        ErrorContext(owner_id=str(owner_id), task_id=str(task_id)),
    )
