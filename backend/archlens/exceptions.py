"""
ArchLens Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the different error scenarios.
Why:   Each exception maps to one HTTP status code; global handlers registered
       in main.py render the JSON body, so routes never build error responses.
How:   Every exception carries a user-facing `message` and a `context` dict
       that is logged but never returned to the client.

Exception Hierarchy:
    ArchLensError (base)
    ├── ValidationError      → 400 Bad Request (client can fix)
    ├── NotFoundError        → 404 Not Found
    ├── DatabaseError        → 500 Internal Server Error (generic body)
    └── RequestFailedError   → 500 Internal Server Error (endpoint message + details)

Error body shape:
    {"error": "<human message>", "details": "<cause>", "request_id": "a1b2c3d4"}

    `details` is only present for RequestFailedError raised with a cause.
"""

from typing import Any, Dict, Optional


class ArchLensError(Exception):
    """
    Base exception for all ArchLens application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ArchLensError):
    """
    Raised when client input fails a business-rule check.

    HTTP: 400 Bad Request

    Example response:
        {"error": "Rating must be between 1 and 5", "request_id": "a1b2c3d4"}
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


class NotFoundError(ArchLensError):
    """
    Raised when a requested record does not exist.

    HTTP: 404 Not Found

    Services return None/False for missing records; routes convert that into
    NotFoundError with the wording of their own resource ("Analysis", "Project").
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class DatabaseError(ArchLensError):
    """
    Raised by the service layer when a query fails.

    HTTP: 500 Internal Server Error

    The message is a short operation summary ("Failed to delete analysis").
    Driver errors, SQL and constraint names stay in `context` and the log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RequestFailedError(ArchLensError):
    """
    Raised by a route when its operation fails for any unexpected reason.

    HTTP: 500 Internal Server Error

    `message` is the endpoint's failure summary ("Failed to delete project").
    `details` is the underlying error's message and is returned to the client;
    endpoints that must not expose it pass details=None.
    """

    def __init__(
        self,
        message: str = "Request failed",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.details = details

    @classmethod
    def from_exception(
        cls, message: str, exc: Exception, include_details: bool = True
    ) -> "RequestFailedError":
        """
        Wrap an arbitrary exception, using its message as `details`.

        ArchLensError subclasses contribute their `message`; other exceptions
        contribute str(exc), or "Unknown error" when that is empty.
        """
        details = None
        if include_details:
            if isinstance(exc, ArchLensError):
                details = exc.message
            else:
                details = str(exc) or "Unknown error"
        return cls(
            message=message,
            details=details,
            context={"error_type": type(exc).__name__},
        )
