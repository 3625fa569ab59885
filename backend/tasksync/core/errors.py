"""Error Hierarchy - typed, categorized exceptions for all TaskSync failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are raised BEFORE any persistence or broadcast
    - to_response() produces REST envelope; to_ws_event() produces WebSocket envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TaskSyncError base: one FastAPI handler catches all
      and the WebSocket gateway reuses the same envelope (ADR: uniform error shape)
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and client hints."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    owner_id: str | None = None
    task_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class TaskSyncError(Exception):
    """Base exception for all TaskSync errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "owner_id": self.context.owner_id,
                    "task_id": self.context.task_id,
                },
            }
        }

    def to_ws_event(self) -> dict:
        """Convert to a server->client connection event."""
        return {
            "type": "error",
            "data": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "severity": self.severity.value,
            },
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidCredentialError(TaskSyncError):
    """Token absent, malformed, wrongly signed, or expired."""
    def __init__(
        self,
        message: str = "Invalid or missing credentials",
        code: str = "INVALID_CREDENTIAL",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class TaskValidationError(TaskSyncError):
    """Input rejected before any mutation was attempted."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(TaskSyncError):
    """Requested resource does not exist for this owner."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class EmailTakenError(TaskSyncError):
    """Registration attempted with an email that already has an account."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Email already registered",
            "EMAIL_TAKEN", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TaskSyncError):
    """Database operation failed. Never retried by the service layer."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
