"""
Rent The Moment Backend — Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for the different failure scenarios.
Why:   Targeted error handling with the right HTTP status code and a
       user-facing message that never leaks storage internals.
How:   Each exception carries a message and an optional context dict.
       Global handlers (registered in main.py) turn them into
       `{"success": false, "message": ...}` responses.

Exception Hierarchy:
    RentMomentError (base)
    ├── ValidationFailure      → 400 Bad Request
    ├── AuthenticationError    → 401 Unauthorized
    ├── PermissionDeniedError  → 403 Forbidden
    ├── NotFoundError          → 404 Not Found
    ├── ConflictError          → 409 Conflict
    ├── StorageFailure         → 500 Internal Server Error
    ├── FileStorageError       → 500 Internal Server Error
    └── CancellationFailure    → 504 Gateway Timeout

StorageFailure and CancellationFailure are kept apart so callers can tell
"the database is broken" from "the database was too slow / the caller gave up".
"""

from typing import Any, Dict, Optional


class RentMomentError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned in production)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationFailure(RentMomentError):
    """
    Raised when client input fails validation.

    For listing filters this is recovered inside ListingService by dropping
    the offending term; everywhere else it becomes a 400 response.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(RentMomentError):
    """Missing, malformed or expired credentials."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Not authorized, please log in",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(RentMomentError):
    """Authenticated, but not allowed to touch this resource."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Not authorized as an admin",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(RentMomentError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that None
    into NotFoundError so routes stay free of status-code logic.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(RentMomentError):
    """Unique constraint or referential conflict (duplicate email, category in use)."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageFailure(RentMomentError):
    """
    Raised when the database could not complete a read or write.

    Not retried here; retry policy belongs to the database driver/pool.
    The message returned to the client is always generic.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(RentMomentError):
    """Disk full, permission denied, directory not writable, I/O error."""

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CancellationFailure(RentMomentError):
    """
    Raised when a bounded operation timed out or the caller cancelled it.

    Attributes:
        reason: "timeout" or "cancelled"
    """

    status_code = 504
    error_code = "request_timeout"

    def __init__(
        self,
        reason: str = "timeout",
        timeout: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if reason == "cancelled":
            message = "The request was cancelled before it completed."
        else:
            message = "The request took too long to complete. Please try again."
        ctx = context or {}
        ctx["reason"] = reason
        if timeout is not None:
            ctx["timeout_seconds"] = timeout
        super().__init__(message=message, context=ctx)
        self.reason = reason
