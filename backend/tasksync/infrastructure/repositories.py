"""SQL Repositories - Record Store implementations over an AsyncSession.

Invariants:
    - Every task statement filters on owner_id; a matching id under another owner
      behaves exactly like a missing id (None / False)
    - Each mutation is ONE statement followed by commit: per-row atomicity comes
      from the database, no application-level locking
    - add_elapsed increments in SQL (elapsed_seconds + :delta), never read-modify-write
    - Returned TaskRecords are snapshots; ORM instances never leave this module

Design Decisions:
    - UPDATE ... RETURNING: the caller gets the committed row from the same
      statement that changed it (PostgreSQL and SQLite >= 3.35)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasksync.core.domain_types import OwnerId, TaskId, TaskStatus
from tasksync.core.errors import EmailTakenError
from tasksync.core.task_record import TaskRecord
from tasksync.models.task import Task as TaskModel
from tasksync.models.user import User as UserModel

logger = logging.getLogger(__name__)


def _to_record(task: TaskModel) -> TaskRecord:
    return TaskRecord(
        id=TaskId(task.id),
        owner_id=OwnerId(task.owner_id),
        title=task.title,
        status=TaskStatus(task.status),
        description=task.description,
        order_index=task.order_index,
        due_date=task.due_date,
        elapsed_seconds=task.elapsed_seconds,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _to_columns(fields: dict) -> dict:
    """Enum values to their stored strings."""
    return {
        name: value.value if isinstance(value, TaskStatus) else value
        for name, value in fields.items()
    }


class SqlTaskRepository:
    """TaskRepository backed by the `tasks` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_by_owner(self, owner_id: OwnerId) -> list[TaskRecord]:
        result = await self.db.execute(
            select(TaskModel)
            .where(TaskModel.owner_id == owner_id)
            .order_by(TaskModel.created_at.asc(), TaskModel.id.asc())
        )
        return [_to_record(t) for t in result.scalars().all()]

    async def create(self, owner_id: OwnerId, fields: dict) -> TaskRecord:
        task = TaskModel(owner_id=owner_id, **_to_columns(fields))
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return _to_record(task)

    async def update(
        self, owner_id: OwnerId, task_id: TaskId, fields: dict,
    ) -> TaskRecord | None:
        values = _to_columns(fields)
        values["updated_at"] = datetime.now(timezone.utc)
        return await self._update_returning(owner_id, task_id, values)

    async def add_elapsed(
        self, owner_id: OwnerId, task_id: TaskId, delta_seconds: int,
    ) -> TaskRecord | None:
        return await self._update_returning(owner_id, task_id, {
            "elapsed_seconds": TaskModel.elapsed_seconds + delta_seconds,
            "updated_at": datetime.now(timezone.utc),
        })

    async def delete(self, owner_id: OwnerId, task_id: TaskId) -> bool:
        result = await self.db.execute(
            delete(TaskModel)
            .where(TaskModel.id == task_id)
            .where(TaskModel.owner_id == owner_id)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def _update_returning(
        self, owner_id: OwnerId, task_id: TaskId, values: dict,
    ) -> TaskRecord | None:
        result = await self.db.scalars(
            update(TaskModel)
            .where(TaskModel.id == task_id)
            .where(TaskModel.owner_id == owner_id)
            .values(**values)
            .returning(TaskModel)
            .execution_options(populate_existing=True)
        )
        task = result.one_or_none()
        if task is None:
            await self.db.rollback()
            return None
        record = _to_record(task)
        await self.db.commit()
        return record


class SqlUserRepository:
    """UserRepository backed by the `users` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> dict | None:
        result = await self.db.execute(
            select(UserModel).where(UserModel.email == email),
        )
        user = result.scalar_one_or_none()
        return _user_to_dict(user) if user else None

    async def get_by_id(self, owner_id: OwnerId) -> dict | None:
        user = await self.db.get(UserModel, owner_id)
        return _user_to_dict(user) if user else None

    async def create(
        self, name: str | None, email: str, password_hash: str,
    ) -> dict:
        user = UserModel(name=name, email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise EmailTakenError()
        await self.db.refresh(user)
        logger.info("User registered", extra={"owner_id": user.id})
        return _user_to_dict(user)


def _user_to_dict(user: UserModel) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "password_hash": user.password_hash,
        "created_at": user.created_at,
    }
