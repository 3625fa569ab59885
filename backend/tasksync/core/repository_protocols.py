"""Boundary Protocols - contracts between core/services and the shell.

Invariants:
    - Services NEVER import SQLAlchemy or WebSocket types; they see these Protocols
    - Every TaskRepository method is scoped by (owner_id, task_id): an id alone
      never reaches a row
    - Mutating methods return the record only after it is durably committed,
      or None when no row matched (owner mismatch included)

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - Connection.deliver is synchronous and non-blocking: the registry can fan out
      without awaiting any single session
"""

from typing import Protocol

from tasksync.core.domain_types import ConnectionId, OwnerId, TaskId
from tasksync.core.task_record import TaskRecord


class TaskRepository(Protocol):
    """Record Store contract for tasks - implemented by shell."""
    async def list_by_owner(self, owner_id: OwnerId) -> list[TaskRecord]: ...
    async def create(self, owner_id: OwnerId, fields: dict) -> TaskRecord: ...
    async def update(
        self, owner_id: OwnerId, task_id: TaskId, fields: dict,
    ) -> TaskRecord | None: ...
    async def delete(self, owner_id: OwnerId, task_id: TaskId) -> bool: ...
    async def add_elapsed(
        self, owner_id: OwnerId, task_id: TaskId, delta_seconds: int,
    ) -> TaskRecord | None: ...


class UserRepository(Protocol):
    """Account persistence contract - implemented by shell."""
    async def get_by_email(self, email: str) -> dict | None: ...
    async def get_by_id(self, owner_id: OwnerId) -> dict | None: ...
    async def create(self, name: str | None, email: str, password_hash: str) -> dict: ...


class Connection(Protocol):
    """One live persistent session, bound to one owner for its lifetime."""
    id: ConnectionId
    owner_id: OwnerId

    def deliver(self, message: dict) -> None: ...
