"""Task Rules - pure validation for task creation, patches, status moves and timers.

Invariants:
    - Every function is PURE: returns normalized data or raises TaskValidationError
    - Nothing here is persisted; callers validate the WHOLE input before writing,
      so a multi-field update is either fully valid or not attempted
    - status ∈ TaskStatus; any status may move to any other, so a patch only
      checks the target value, never the current one
    - elapsed_seconds is never settable by a patch; it only grows via validate_delta

Design Decisions:
    - Status validation lives here rather than relying on the DB check constraint,
      so the service rejects bad values before touching storage
"""

from datetime import datetime
from typing import Any

from tasksync.core.domain_types import TaskStatus
from tasksync.core.errors import TaskValidationError

TITLE_MAX_LENGTH = 500

PATCHABLE_FIELDS = frozenset({
    "title", "description", "status", "order_index", "due_date",
})
IMMUTABLE_FIELDS = frozenset({
    "id", "owner_id", "elapsed_seconds", "created_at", "updated_at",
})


# ─── Field validators ────────────────────────────────────────────

def validate_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise TaskValidationError("title is required", "title")
    title = value.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise TaskValidationError(
            f"title must be at most {TITLE_MAX_LENGTH} characters", "title",
        )
    return title


def validate_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise TaskValidationError(
            f"status must be one of: {allowed}", "status",
        )


def validate_delta(delta: Any) -> int:
    """Accumulation delta: a non-negative whole number of seconds."""
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise TaskValidationError("delta_seconds must be an integer", "delta_seconds")
    if delta < 0:
        raise TaskValidationError("delta_seconds must not be negative", "delta_seconds")
    return delta


def _validate_description(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise TaskValidationError("description must be a string", "description")


def _validate_order_index(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TaskValidationError("order_index must be an integer", "order_index")
    return value


def _validate_due_date(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    raise TaskValidationError("due_date must be an ISO-8601 timestamp", "due_date")


_FIELD_VALIDATORS = {
    "title": validate_title,
    "description": _validate_description,
    "status": validate_status,
    "order_index": _validate_order_index,
    "due_date": _validate_due_date,
}


# ─── Whole-input normalization ───────────────────────────────────

def _reject_unknown(fields: dict) -> None:
    for name in fields:
        if name in IMMUTABLE_FIELDS:
            raise TaskValidationError(f"{name} cannot be set by the client", name)
        if name not in PATCHABLE_FIELDS:
            raise TaskValidationError(f"Unknown field: {name}", name)


def normalize_new_task(fields: dict) -> dict:
    """Validate creation input. Defaults: status=pending, elapsed_seconds=0."""
    _reject_unknown(fields)
    if "title" not in fields:
        raise TaskValidationError("title is required", "title")
    normalized = {
        name: _FIELD_VALIDATORS[name](value) for name, value in fields.items()
    }
    normalized.setdefault("status", TaskStatus.PENDING)
    normalized["elapsed_seconds"] = 0
    return normalized


def normalize_patch(patch: dict) -> dict:
    """Validate a partial update. Only PATCHABLE_FIELDS are accepted."""
    _reject_unknown(patch)
    return {name: _FIELD_VALIDATORS[name](value) for name, value in patch.items()}
