"""Task Routes - Request Gateway for owner-scoped task CRUD, moves and timers.

Invariants:
    - Every route depends on get_current_owner: no token, no processing
    - Routes only translate HTTP <-> TaskService; failures are TaskSyncError and
      reach the global handlers unchanged
    - The response body IS the broadcast payload (TaskRecord.to_payload)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from tasksync.api.dependencies import get_current_owner, get_task_service
from tasksync.core.domain_types import OwnerId, TaskId
from tasksync.schemas.task import (
    DeleteResponse, TaskCreate, TaskResponse, TaskUpdate, TimeAccumulate,
)
from tasksync.services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    owner_id: OwnerId = Depends(get_current_owner),
    service: TaskService = Depends(get_task_service),
):
    """All of the caller's tasks, oldest first."""
    return [t.to_payload() for t in await service.list_tasks(owner_id)]


@router.post(
    "", response_model=TaskResponse, status_code=status.HTTP_201_CREATED,
)
async def create_task(
    body: TaskCreate,
    owner_id: OwnerId = Depends(get_current_owner),
    service: TaskService = Depends(get_task_service),
):
    record = await service.create_task(owner_id, body.model_dump(exclude_unset=True))
    return record.to_payload()


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    body: TaskUpdate,
    owner_id: OwnerId = Depends(get_current_owner),
    service: TaskService = Depends(get_task_service),
):
    """Partial update. Moving a card is a status and/or orderIndex patch."""
    record = await service.update_task(
        owner_id, TaskId(task_id), body.model_dump(exclude_unset=True),
    )
    return record.to_payload()


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: UUID,
    owner_id: OwnerId = Depends(get_current_owner),
    service: TaskService = Depends(get_task_service),
):
    await service.delete_task(owner_id, TaskId(task_id))
    return DeleteResponse(success=True)


@router.post("/{task_id}/time", response_model=TaskResponse)
async def accumulate_time(
    task_id: UUID,
    body: TimeAccumulate,
    owner_id: OwnerId = Depends(get_current_owner),
    service: TaskService = Depends(get_task_service),
):
    """Add a client-measured timer interval to elapsedSeconds."""
    record = await service.accumulate_time(
        owner_id, TaskId(task_id), body.delta_seconds,
    )
    return record.to_payload()
