"""
SpeciesBoard Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure a handler can report.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services; caught by the global handlers.

Exception Hierarchy:
    SpeciesBoardError (base)
    ├── ValidationError    → 400 Bad Request (missing or malformed field)
    ├── UnauthorizedError  → 401 Unauthorized (old password mismatch)
    ├── NotFoundError      → 404 Not Found (login absent)
    ├── ConflictError      → 409 Conflict (login already taken)
    └── DatabaseError      → 500 Internal Server Error (any other store failure)
"""

from typing import Any, Dict, Optional


class SpeciesBoardError(Exception):
    """
    Base exception for all SpeciesBoard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and returned only where the
                  handler explicitly exposes it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SpeciesBoardError):
    """
    Raised when client input fails validation.

    When:    Missing required field, unparseable date, empty or oversized upload.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Login is required",
            "details": {"field": "login"}
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


class UnauthorizedError(SpeciesBoardError):
    """Raised when a supplied credential does not match the stored one. HTTP 401."""

    def __init__(
        self,
        message: str = "The supplied password is incorrect",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SpeciesBoardError):
    """
    Raised when a referenced record does not exist.

    When:    change-password for an unknown login.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(SpeciesBoardError):
    """
    Raised when an insert hits a uniqueness constraint.

    When:    add-player with a login that already exists.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "A record with these values already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SpeciesBoardError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Details (driver
    error class, login, query kind) stay in `context` and the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
