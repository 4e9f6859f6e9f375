"""
Status Tracker Backend: FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers.
Who:   uvicorn (uvicorn status_tracker.main:app) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware Chain:                                           │
    │  ┌────────────┐ ┌────────┐ ┌─────────┐ ┌──────────┐ ┌──────┐ │
    │  │ Rate Limit │→│ Req ID │→│ Logging │→│ Security │→│ CORS │ │
    │  └────────────┘ └────────┘ └─────────┘ └──────────┘ └──────┘ │
    │                                                              │
    │  Routes:                                                     │
    │  ┌───────────┐ ┌─────────────┐ ┌──────────────┐ ┌─────────┐  │
    │  │ /api/auth │ │ /api/status │ │ /api/privacy │ │ /health │  │
    │  └───────────┘ └─────────────┘ └──────────────┘ └─────────┘  │
    │                                                              │
    │  Exception Handlers → {"success": false, "error", "code"}    │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (refuse to start on an unsafe production config)
    3. Create tables (AUTO_CREATE_TABLES)
    4. Seed the admin account (ADMIN_USERNAME / ADMIN_PASSWORD)

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from status_tracker import __version__
from status_tracker.config import settings
from status_tracker.database import async_session_factory, dispose_engine, init_models
from status_tracker.exceptions import DatabaseError, StatusTrackerError
from status_tracker.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    request_id_var,
)
from status_tracker.routes import auth, health, privacy, status
from status_tracker.services.auth_service import auth_service

logger = logging.getLogger(__name__)

CHECK_CONSTRAINT_MARKER = "CHECK constraint failed"
CONSTRAINT_VIOLATION_MESSAGE = "Invalid data: altitude must be between 1 and 10"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once for the whole application.

    Format: 2024-01-15T12:00:00 [INFO] status_tracker.access: GET /api/status 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our own access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def seed_admin() -> None:
    """Create the ADMIN_USERNAME account if both admin settings are present."""
    if not (settings.admin_username and settings.admin_password):
        return

    async with async_session_factory() as session:
        created = await auth_service.ensure_admin(
            session, settings.admin_username, settings.admin_password
        )
        await session.commit()

    if created:
        logger.info("Seeded admin user '%s'", settings.admin_username)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Personal Status Tracker API %s starting (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        raise

    if settings.auto_create_tables:
        await init_models()
        logger.info("Database tables ensured")

    await seed_admin()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Personal Status Tracker API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def is_check_constraint_error(exc: BaseException) -> bool:
    """True for a CHECK violation raised directly or wrapped in DatabaseError."""
    if isinstance(exc, DatabaseError) and exc.original_error is not None:
        exc = exc.original_error
    return CHECK_CONSTRAINT_MARKER in str(exc)


def format_validation_errors(exc: RequestValidationError) -> str:
    """
    One "<field>: <message>" entry per error, joined with ", ".

    The location prefix ("body", "query", "path") is dropped. Model-level
    errors have no field and contribute the bare message.
    """
    parts = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            parts.append("Invalid JSON in request body")
            continue
        loc = [str(part) for part in error.get("loc", ())[1:]]
        msg = error.get("msg", "Invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return ", ".join(parts) or "Invalid request"


def error_response(
    exc: BaseException,
    status_code: int,
    message: str,
    code: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the error envelope and log it; development responses carry the traceback."""
    rid = request_id_var.get()
    if status_code >= 500:
        logger.error("[%s] %s: %s", rid, code, exc, exc_info=exc)
    else:
        logger.warning("[%s] %s: %s", rid, code, message)

    content: Dict[str, Any] = {"success": False, "error": message, "code": code}
    if settings.is_development:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to the standard error envelope.

    Handler hierarchy:
        StatusTrackerError      → its own status/code (CHECK violations → 400)
        RequestValidationError  → 400 VALIDATION_ERROR, aggregated messages
        SQLAlchemyError         → 400 CONSTRAINT_VIOLATION or 500 DATABASE_ERROR
        HTTPException 404       → 404 ENDPOINT_NOT_FOUND
        HTTPException (other)   → its status, HTTP_<status>
        Exception (fallback)    → 500 INTERNAL_ERROR
    """

    @app.exception_handler(StatusTrackerError)
    async def handle_app_error(request: Request, exc: StatusTrackerError):
        if isinstance(exc, DatabaseError) and is_check_constraint_error(exc):
            return error_response(exc, 400, CONSTRAINT_VIOLATION_MESSAGE, "CONSTRAINT_VIOLATION")

        headers = None
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            headers = {"Retry-After": str(retry_after)}
        return error_response(exc, exc.status_code, exc.message, exc.code, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response(exc, 400, format_validation_errors(exc), "VALIDATION_ERROR")

    @app.exception_handler(SQLAlchemyError)
    async def handle_sqlalchemy_error(request: Request, exc: SQLAlchemyError):
        if is_check_constraint_error(exc):
            return error_response(exc, 400, CONSTRAINT_VIOLATION_MESSAGE, "CONSTRAINT_VIOLATION")
        return error_response(exc, 500, "Database operation failed", "DATABASE_ERROR")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(
                exc,
                404,
                f"Endpoint {request.method} {request.url.path} not found",
                "ENDPOINT_NOT_FOUND",
            )
        return error_response(
            exc,
            exc.status_code,
            str(exc.detail),
            f"HTTP_{exc.status_code}",
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        message = str(exc) if settings.is_development else "Internal server error"
        return error_response(exc, 500, message or "Internal server error", "INTERNAL_ERROR")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests call this directly to get a fresh app (and fresh rate limit state)
    per test.
    """
    app = FastAPI(
        title="Personal Status Tracker API",
        description=(
            "Tracks one person's last water intake and mood altitude. "
            "Admins record status; viewers follow it."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → Security → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(status.router)
    app.include_router(privacy.router)
    app.include_router(health.router)

    return app


app = create_app()
