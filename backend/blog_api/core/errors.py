"""Error Hierarchy — typed, categorized exceptions for all Blog API failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are raised before any side effect; infrastructure
      errors (500-level) abort the operation that raised them
    - to_response() produces the REST envelope: {"success": false, "message", "code", ...}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with BlogApiError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Asset cleanup failures have no exception class: they are logged with
      ASSET_CLEANUP_FAILED and never leave the asset store adapter
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


ASSET_CLEANUP_FAILED = "ASSET_CLEANUP_FAILED"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    post_id: str | None = None
    retry_after_ms: int | None = None


class BlogApiError(Exception):
    """Base exception for all Blog API errors."""

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
            "success": False,
            "message": self.message,
            "code": self.code,
            "category": self.category.value,
            "timestamp": self.context.timestamp.isoformat(),
        }

    def response_headers(self) -> dict[str, str] | None:
        """Extra HTTP headers for this error (None when there are none)."""
        return None


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationFailedError(BlogApiError):
    """Malformed or out-of-range input. Carries the field -> messages map."""
    def __init__(
        self, errors: dict[str, list[str]], context: ErrorContext | None = None,
    ):
        super().__init__(
            "Validation failed", "VALIDATION_FAILED", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.errors = errors

    def to_response(self) -> dict:
        response = super().to_response()
        response["errors"] = self.errors
        return response


class UnsupportedMediaError(BlogApiError):
    """Uploaded blob fails type or size constraints."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UNSUPPORTED_MEDIA", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class UnauthenticatedError(BlogApiError):
    """Missing, expired, or invalid credential."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )

    def response_headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class PostNotFoundError(BlogApiError):
    """Identifier has no live post record."""
    def __init__(self, post_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.post_id = post_id
        super().__init__(
            "Post not found", "POST_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, ctx, 404,
        )


class RateLimitedError(BlogApiError):
    """Admission budget exceeded for this client address."""
    def __init__(
        self,
        message: str,
        admission_class: str,
        retry_after_ms: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            message, "RATE_LIMITED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, ctx, 429,
        )
        self.admission_class = admission_class

    def response_headers(self) -> dict[str, str]:
        # Retry-After is whole seconds, rounded up
        seconds = -(-(self.context.retry_after_ms or 0) // 1000)
        return {"Retry-After": str(max(seconds, 1))}


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(BlogApiError):
    """Record store operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class AssetStorageError(BlogApiError):
    """Remote image store rejected or failed an upload."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Asset {operation} failed: {message}",
            "ASSET_STORAGE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
