"""
Postboard Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each failure kind.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON error responses with the matching HTTP status code.
Who:   Raised by services and the entity accessor; caught by global handlers.

Exception Hierarchy:
    PostboardError (base)
    ├── ValidationError      → 400 Bad Request
    ├── NotFoundError        → 404 Not Found
    ├── ConfigurationError   → 500 Internal Server Error
    ├── StoreError           → 500 Internal Server Error
    └── FilesystemError      → 500 Internal Server Error

None of these propagate past the handler boundary: every one becomes an
HTTP response with either an "error" or a "message" field.
"""

from typing import Any, Dict, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

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


class ValidationError(PostboardError):
    """
    Raised when client input fails validation.

    When:    Malformed post id, empty title/description, missing image on create.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "Field 'title' is required and must not be empty",
            "details": {"field": "title"}
        }
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


class NotFoundError(PostboardError):
    """
    Raised when a requested resource does not exist.

    The store returns None for a missing document; PostStore and PostService
    turn that None into this exception so the route layer stays free of
    status-code checks.
    """

    def __init__(
        self,
        resource: str = "Post",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class ConfigurationError(PostboardError):
    """
    Raised when required deployment configuration is absent.

    When:    DELETE with no UPLOADS_PATH configured.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Required configuration is missing",
        setting: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if setting:
            ctx["setting"] = setting
        super().__init__(message=message, context=ctx)
        self.setting = setting


class StoreError(PostboardError):
    """
    Raised when a document store operation fails.

    When:    Connection lost, server selection timeout, write error.
    HTTP:    500 Internal Server Error

    The original driver error is kept in context for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FilesystemError(PostboardError):
    """
    Raised when an image file cannot be written or removed.

    A missing file on delete is NOT this error; it is logged and ignored.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
