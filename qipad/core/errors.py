"""Error Hierarchy - typed, categorized exceptions for all Qipad failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope; it always carries a top-level
      "message" so clients can surface it without knowing the envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with QipadError base: the API handler and the client
      layer both catch the base class
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
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    action: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class QipadError(Exception):
    """Base exception for all Qipad errors."""

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
            "message": self.context.user_message or self.message,
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "action": self.context.action,
                },
            },
        }


# --- Domain Errors (400-level) -----------------------------------

class ValidationError(QipadError):
    """Request data failed a business-level validation."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InvalidAmountError(QipadError):
    """Credit amount is zero or negative."""
    def __init__(self, amount: object, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid credit amount: {amount}",
            "INVALID_CREDIT_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.amount = amount


class InsufficientCreditsError(QipadError):
    """Wallet balance does not cover the action."""
    def __init__(
        self, required: object, available: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Insufficient credits: {required} required, {available} available",
            "INSUFFICIENT_CREDITS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.required = required
        self.available = available


class KycRequiredError(QipadError):
    """Action restricted to KYC-verified members."""
    def __init__(self, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"KYC verification required: only KYC-verified members can {action}",
            "KYC_REQUIRED", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 403,
        )
        self.action = action


class AuthenticationError(QipadError):
    """Missing, invalid or expired credentials."""
    def __init__(self, message: str = "Authentication required", context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(QipadError):
    """Authenticated principal may not perform the action."""
    def __init__(self, message: str = "Permission denied", context: ErrorContext | None = None):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(QipadError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConflictError(QipadError):
    """Write conflicts with existing state (duplicate email, already a member)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# --- Infrastructure Errors (500-level) ---------------------------

class DatabaseError(QipadError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class CleanupError(QipadError):
    """A production-data cleanup step failed; remaining steps were skipped."""
    def __init__(self, table: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cleanup of '{table}' failed: {message}",
            "CLEANUP_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.table = table


# --- Client-side Errors ------------------------------------------

class ApiRequestError(QipadError):
    """Non-2xx response (or transport failure, status 0) from the Qipad API."""
    def __init__(
        self, status: int, message: str, payload: Any = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{status}: {message}",
            "API_REQUEST_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, status or 502,
        )
        self.status = status
        self.server_message = message
        self.payload = payload


class UploadValidationError(QipadError):
    """Selected file rejected before any request was issued."""
    def __init__(self, title: str, description: str, context: ErrorContext | None = None):
        super().__init__(
            description, "UPLOAD_VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.title = title
        self.description = description


class UploadError(QipadError):
    """Upload URL, file transfer or ACL step failed."""
    def __init__(self, message: str, step: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UPLOAD_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.step = step
