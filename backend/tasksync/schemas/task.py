"""Task Schemas - camelCase request bodies and the Task response shape.

Invariants:
    - Request bodies carry no owner, id, or elapsedSeconds field; unknown keys are dropped
    - title/status are checked by core.task_rules, not here, so HTTP and direct
      service callers get identical errors

Design Decisions:
    - alias_generator=to_camel + populate_by_name: wire stays camelCase, Python stays snake_case
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(_CamelModel):
    title: str | None = Field(None, max_length=500)
    description: str | None = Field(None, max_length=10_000)
    status: str | None = None
    order_index: int | None = None
    due_date: datetime | None = None


class TaskUpdate(_CamelModel):
    """Partial update; only keys present in the body are applied."""
    title: str | None = Field(None, max_length=500)
    description: str | None = Field(None, max_length=10_000)
    status: str | None = None
    order_index: int | None = None
    due_date: datetime | None = None


class TimeAccumulate(_CamelModel):
    delta_seconds: int


class TaskResponse(_CamelModel):
    id: UUID
    title: str
    description: str | None = None
    status: str
    owner_id: UUID
    order_index: int | None = None
    due_date: datetime | None = None
    elapsed_seconds: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DeleteResponse(BaseModel):
    success: bool = True
