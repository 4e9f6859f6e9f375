"""
Status Tracker Backend: Custom Exception Hierarchy
===================================================

What:  Application-specific exceptions, each carrying its HTTP status code
       and a stable machine-readable error code.
How:   Services and dependencies raise these; the global handlers registered
       in main.py turn them into the error envelope:
           {"success": false, "error": <message>, "code": <code>}
Who:   Raised by services, dependencies and middleware.

Exception Hierarchy:
    StatusTrackerError (base, configurable status/code)  → 500 INTERNAL_ERROR
    ├── ValidationError          → 400 VALIDATION_ERROR[_<FIELD>]
    ├── InvalidOperationError    → 400 INVALID_OPERATION
    ├── AuthenticationError      → 401 UNAUTHORIZED
    ├── PermissionDeniedError    → 403 FORBIDDEN
    ├── NotFoundError            → 404 NOT_FOUND
    ├── RateLimitExceededError   → 429 RATE_LIMIT_EXCEEDED
    └── DatabaseError            → 500 DATABASE_ERROR
"""

from typing import Any, Dict, Optional


class StatusTrackerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (returned in the envelope)
        status_code:  HTTP status the global handler responds with
        code:         Stable machine-readable error code
        context:      Additional debug info (logged, never returned)
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StatusTrackerError):
    """
    Raised when client input fails a business rule.

    When:  Duplicate username, privacy policy not accepted, and every
           aggregated schema validation failure.
    HTTP:  400 Bad Request

    Naming the field specializes the code, e.g. field="username" gives
    VALIDATION_ERROR_USERNAME.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        code = "VALIDATION_ERROR"
        if field:
            ctx["field"] = field
            code = f"VALIDATION_ERROR_{field.upper()}"
        super().__init__(message=message, code=code, context=ctx)
        self.field = field


class InvalidOperationError(StatusTrackerError):
    """Raised for requests that are well-formed but not allowed, e.g. self-deletion."""

    status_code = 400
    code = "INVALID_OPERATION"


class AuthenticationError(StatusTrackerError):
    """
    Raised when a request carries no usable credentials.

    When:  Missing bearer token, invalid/expired token, wrong credentials.
    HTTP:  401 Unauthorized
    """

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(StatusTrackerError):
    """
    Raised when an authenticated user lacks the role for an operation.

    HTTP:  403 Forbidden
    """

    status_code = 403
    code = "FORBIDDEN"

    def __init__(
        self,
        message: str = "Admin access required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StatusTrackerError):
    """
    Raised when a requested resource does not exist.

    What:  SQLAlchemy returns None (or a zero rowcount) for missing records;
           services convert that into this exception.
    HTTP:  404 Not Found

    The default message is "<resource> not found"; pass `message` for
    operation-specific wording.
    """

    status_code = 404
    code = "NOT_FOUND"

    def __init__(
        self,
        resource: str = "Resource",
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=message or f"{resource} not found", context=ctx)
        self.resource = resource


class RateLimitExceededError(StatusTrackerError):
    """
    Raised when a client exceeds a rate limit budget.

    HTTP:  429 Too Many Requests, with a Retry-After header
    """

    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(
        self,
        retry_after: int = 60,
        message: str = "Too many requests, please try again later",
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, code=code, context=ctx)
        self.retry_after = retry_after


class DatabaseError(StatusTrackerError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP:  500 Internal Server Error

    The raw driver exception is kept on `original_error`. The global handler
    inspects its text to recognise CHECK constraint violations, which are
    reported as 400 CONSTRAINT_VIOLATION instead.
    """

    status_code = 500
    code = "DATABASE_ERROR"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        original_error: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if original_error is not None:
            ctx["original_error"] = type(original_error).__name__
        super().__init__(message=message, context=ctx)
        self.original_error = original_error
