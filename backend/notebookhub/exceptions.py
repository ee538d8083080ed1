"""
NotebookHub Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every error the API can report.
Why:   Services raise typed errors; global handlers in main.py translate them
       into status codes and a consistent JSON body. Internal details never
       leak to the client.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged but not returned.

Exception Hierarchy:
    NotebookHubError (base)
    ├── ValidationError      → 400 Bad Request (client can fix)
    ├── UnauthorizedError    → 401 Unauthorized (no credential)
    ├── ForbiddenError       → 403 Forbidden (credential rejected)
    ├── NotFoundError        → 404 Not Found
    ├── FileStorageError     → 500 Internal Server Error
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class NotebookHubError(Exception):
    """
    Base exception for all NotebookHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotebookHubError):
    """
    Raised when client input fails validation.

    When:    Missing file, wrong file type, oversized payload, empty title,
             unknown sort key, attempt to edit an immutable field.
    HTTP:    400 Bad Request
    """

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


class UnauthorizedError(NotebookHubError):
    """
    Raised when an admin-only operation is called without a bearer token.

    HTTP:    401 Unauthorized, with `WWW-Authenticate: Bearer`
    Also used for a failed login (wrong username or password).
    """

    def __init__(
        self,
        message: str = "Access token is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(NotebookHubError):
    """
    Raised when a bearer token is present but cannot be trusted.

    When:    Bad signature, malformed token, expired token, missing subject.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Invalid or expired token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotebookHubError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown document id, deleted document, missing stored file.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(NotebookHubError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, libmagic unavailable or broken.
    HTTP:    500 Internal Server Error (paths are logged, never returned)
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NotebookHubError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. SQL, constraint
    names and driver errors are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
