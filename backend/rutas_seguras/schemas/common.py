"""
Rutas Seguras Backend — Shared Response Envelope Schemas
========================================================

What:  Pydantic models shared by every endpoint: the success envelope, the
       error envelope, the pagination block and the health payload.
Why:   One contract for clients. Every success response has the same outer
       shape, and every error response has the same outer shape.
Who:   Route handlers wrap service results in `ApiResponse`; the global
       exception handlers in main.py build `ErrorResponse` bodies.

Envelope:
    Success: {"success": true,  "message": "...", "data": {...}, "timestamp": "..."}
    Error:   {"success": false, "error": "not_found", "message": "...",
              "details": {...} | null, "request_id": "a1b2c3d4", "timestamp": "..."}
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Success Envelope
# ══════════════════════════════════════════════════════════════════════════


class ApiResponse(BaseModel, Generic[T]):
    """
    What:  Outer wrapper for every successful response.
    How:   Parametrized by payload type so OpenAPI documents the real `data`
           shape per endpoint (e.g. `ApiResponse[RouteSearchResponse]`).
    """
    success: bool = Field(default=True, description="Always true for 2xx responses")
    message: str = Field(default="OK", description="Human-readable outcome")
    data: Optional[T] = Field(default=None, description="Endpoint-specific payload")
    timestamp: datetime = Field(default_factory=utc_now, description="Server time (UTC ISO 8601)")


class Pagination(BaseModel):
    """
    What:  Page-number pagination block used by search and every list endpoint.

    total_pages = ceil(total_items / items_per_page), and 0 when nothing matches.
    A current_page beyond total_pages is legal and pairs with an empty item list.
    """
    current_page: int = Field(description="Page actually served, after clamping")
    total_pages: int = Field(description="Number of pages for the current filters")
    total_items: int = Field(description="Rows matching the current filters")
    items_per_page: int = Field(description="Page size")


# ══════════════════════════════════════════════════════════════════════════
# Error Envelope
# ══════════════════════════════════════════════════════════════════════════


class FieldError(BaseModel):
    field: str = Field(description="Dotted path of the offending input (e.g. 'body.email')")
    message: str = Field(description="What is wrong with it")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.
    Why:   Clients need a consistent structure to parse errors programmatically.

    Fields:
        error:      Machine-readable error code ("validation_error", "not_found", ...)
        message:    Human-readable description for display to users
        details:    Optional extra context (e.g. per-field validation errors)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "success": false,
            "error": "conflict",
            "message": "A user with this email already exists",
            "details": {"field": "email"},
            "request_id": "550e8400",
            "timestamp": "2026-01-15T12:00:00Z"
        }
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    timestamp: datetime = Field(default_factory=utc_now)


class ValidationErrorDetails(BaseModel):
    errors: List[FieldError]


# ══════════════════════════════════════════════════════════════════════════
# Health
# ══════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
