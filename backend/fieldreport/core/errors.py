"""Error Hierarchy: typed, categorized exceptions for all FieldReport failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; storage errors (500-level) are critical
    - to_response() produces the REST envelope used by api/error_handlers.py
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with FieldReportError base: FastAPI global handler catches all
    - Storage errors are raised by backends and caught at the ScopedStore boundary;
      the store converts them to False / default results
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    STORAGE = "storage"
    CAPACITY = "capacity"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    project_id: str | None = None
    logical_key: str | None = None
    physical_key: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class FieldReportError(Exception):
    """Base exception for all FieldReport errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "project_id": self.context.project_id,
                    "logical_key": self.context.logical_key,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class BackupFormatError(FieldReportError):
    """Backup payload could not be parsed or lacks version/data."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_BACKUP", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidEntryError(FieldReportError):
    """Entry value cannot be stored (not JSON-serializable)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ENTRY", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class ResourceNotFoundError(FieldReportError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Storage Errors (500-level) ─────────────────────────────────

class StorageBackendError(FieldReportError):
    """Backend read/write/delete failed (availability, driver error)."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class StorageQuotaExceededError(FieldReportError):
    """Write rejected because the storage area is full."""
    def __init__(
        self, used_bytes: int, quota_bytes: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or (
            "Storage limit reached! Consider exporting and deleting old reports."
        )
        super().__init__(
            f"Storage quota exceeded ({used_bytes}/{quota_bytes} bytes)",
            "STORAGE_QUOTA_EXCEEDED", ErrorCategory.CAPACITY,
            ErrorSeverity.CRITICAL, ctx, 507,
        )
        self.used_bytes = used_bytes
        self.quota_bytes = quota_bytes
