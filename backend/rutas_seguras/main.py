"""
Rutas Seguras Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn rutas_seguras.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌────────┐ ┌──────────────┐   │
    │  │  Req ID  │→│ Logging  │→│  GZip  │→│     CORS     │   │
    │  └──────────┘ └──────────┘ └────────┘ └──────────────┘   │
    │                                                          │
    │  Routers:                                                │
    │  /api/auth  /api/routes  /api/units  /api/users          │
    │  /api/contacts  /api/stats  /health                      │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ Forbidden→403 │ 404/409 │  │
    │  │ Server/DB→500  │ HTTPException │ Exception→500      │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate security-critical configuration
    3. Log startup complete

    Shutdown:
    1. Dispose the database engine (close all pooled connections)
    2. Log shutdown complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rutas_seguras import __version__
from rutas_seguras.config import Settings, settings
from rutas_seguras.database import Database
from rutas_seguras.exceptions import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RutasSegurasError,
    ServerError,
    ValidationError,
)
from rutas_seguras.middleware.logging import RequestLoggingMiddleware
from rutas_seguras.middleware.request_id import RequestIDMiddleware, request_id_var
from rutas_seguras.routes import auth, contacts, health, stats, transit_routes, units, users
from rutas_seguras.schemas.common import ErrorResponse, FieldError, ValidationErrorDetails

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the entire application.

    What:    Sets up logging with a consistent format across all modules.
    When:    Called once during app startup (before any other initialization).

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    log_level = level or settings.log_level

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,  # Override any existing logging config
    )

    # These log at DEBUG/INFO for every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    Code before yield runs on startup, code after yield runs on shutdown.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Rutas Seguras Backend v%s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Tokens signed with the placeholder secret are forgeable. Fix and restart.")

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Rutas Seguras Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the standard error envelope."""
    body = ErrorResponse(
        error=error,
        message=message,
        details=details or None,
        request_id=request_id_var.get("") or None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400 Bad Request
        AuthError                                → 401 Unauthorized
        ForbiddenError                           → 403 Forbidden
        NotFoundError                            → 404 Not Found
        ConflictError                            → 409 Conflict
        ServerError (incl. DatabaseError)        → 500, generic message
        RutasSegurasError (base)                 → 500, generic message
        StarletteHTTPException                   → its own status
        Exception (fallback)                     → 500, stack trace logged

    Security: handlers never put stack traces, SQL or driver messages in the
    response. Server-side context is logged instead.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent input that breaks a business rule."""
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body, query or path failed schema validation (also malformed JSON and bad UUIDs)."""
        errors = [
            FieldError(
                field=".".join(str(part) for part in err.get("loc", ())),
                message=err.get("msg", "Invalid value"),
            )
            for err in exc.errors()
        ]
        logger.warning(
            "[%s] Request validation failed: %s",
            request_id_var.get(""),
            ", ".join(e.field for e in errors),
        )
        return error_response(
            400,
            "validation_error",
            "Request validation failed",
            ValidationErrorDetails(errors=errors).model_dump(),
        )

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        return error_response(
            401,
            "unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return error_response(403, "forbidden", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        """Requested resource doesn't exist (or was soft-deleted)."""
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return error_response(409, "conflict", exc.message, exc.context)

    @app.exception_handler(ServerError)
    async def handle_server_error(request: Request, exc: ServerError):
        """Server-side failure: generic message to user, details logged server-side."""
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""), type(exc).__name__, exc.message, exc.context,
        )
        return error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(RutasSegurasError)
    async def handle_app_error(request: Request, exc: RutasSegurasError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown paths, wrong methods and other framework-level errors."""
        return error_response(
            exc.status_code,
            "http_error",
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Returns a generic 500 with the request ID for support tickets; the
        stack trace is logged server-side only.
        """
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build the app from; defaults to the
                      environment-loaded singleton. Tests pass a copy pointing
                      at a throwaway SQLite database.

    The database engine is created here and attached to `app.state.database`,
    so every app instance owns its own pool.
    """
    cfg = app_settings or settings

    app = FastAPI(
        title="Rutas Seguras API",
        description=(
            "Transportation management API: route search and catalogue, fleet units, "
            "user administration and contact intake, with JWT bearer authentication "
            "and admin / conductor / cliente roles."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.database = Database(cfg)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition: CORS → GZip → Logging
    # → RequestID is added, so RequestID runs first on the way in.

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Don't compress small responses (overhead > savings)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(transit_routes.router)
    app.include_router(units.router)
    app.include_router(users.router)
    app.include_router(contacts.router)
    app.include_router(stats.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `rutas_seguras.main:app` to be importable
app = create_app()
