"""
Rutas Seguras Backend — Custom Exception Hierarchy
==================================================

What:  One exception per failure outcome of the API (bad input, no token,
       wrong role, unknown id, duplicate key, server failure).
How:   Each carries a client-safe `message` and a `context` dict. The
       handlers in main.py turn the class into the HTTP status and the
       `error` code of the envelope.
Who:   Raised by services, security helpers and auth dependencies.

Exception Hierarchy:
    RutasSegurasError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── AuthError         → 401 Unauthorized (missing/invalid/expired token, bad credentials)
    ├── ForbiddenError    → 403 Forbidden (authenticated, role not allowed)
    ├── NotFoundError     → 404 Not Found
    ├── ConflictError     → 409 Conflict (duplicate unique key)
    └── ServerError       → 500 Internal Server Error
        └── DatabaseError → 500 (query/commit failure)
"""

from typing import Any, Dict, Optional


class RutasSegurasError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only returned for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RutasSegurasError):
    """
    Raised when client input fails a business rule.

    HTTP:    400 Bad Request

    Schema-level failures (wrong types, missing fields) are caught earlier by
    FastAPI's RequestValidationError and mapped to the same 400 envelope.
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


class AuthError(RutasSegurasError):
    """
    Raised when the caller is not authenticated.

    When:    No bearer token, a token that fails verification, or wrong
             login credentials.
    HTTP:    401 Unauthorized

    Login failures always use the same message whether the email is unknown,
    the account is inactive or the password is wrong.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(RutasSegurasError):
    """
    Raised when an authenticated caller lacks the required role.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        required_roles: Optional[tuple] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if required_roles:
            ctx["required_roles"] = list(required_roles)
        super().__init__(message=message, context=ctx)


class NotFoundError(RutasSegurasError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE on an unknown or soft-deleted id.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; services convert that None
    into this exception.
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


class ConflictError(RutasSegurasError):
    """
    Raised when a write would duplicate a unique key (user email, unit plate).

    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ServerError(RutasSegurasError):
    """
    Raised for unexpected server-side failures.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; context is logged
    server-side only.
    """

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(ServerError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, commit failure, etc.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
