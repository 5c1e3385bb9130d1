"""
Petstagram Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database (connection pool) for the given
       settings, stores both on app.state, registers middleware, exception
       handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn petstagram.main:app`) and the test suite, which
       passes its own Settings and Database.

Lifecycle:
    Startup:
    1. Configure logging
    2. Create entity tables (idempotent; "already exists" is fine)
    3. If any table failed for another reason and SCHEMA_FAIL_FAST is on,
       abort startup with SchemaError
    Shutdown:
    1. Dispose the engine (close all pooled connections)

Exception mapping:
    ValidationError → 400 │ NotFoundError → 404 │ ConflictError → 409
    StorageError → 500    │ PetstagramError → 500 │ Exception → 500
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from petstagram import __version__
from petstagram.config import Settings, settings as default_settings
from petstagram.database import Database
from petstagram.exceptions import (
    ConflictError,
    NotFoundError,
    PetstagramError,
    StorageError,
    ValidationError,
)
from petstagram.middleware.logging import RequestLoggingMiddleware
from petstagram.middleware.request_id import RequestIDMiddleware, request_id_var
from petstagram.routes import comments, health, likes, posts, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger once per process.

    Format: 2020-04-01T12:00:00 [INFO] petstagram.database: Created table posts
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-statement and per-request noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("Petstagram backend %s starting up...", __version__)
    logger.info(
        "Database: %s (pool %d..%d)",
        app_settings.sqlalchemy_url.render_as_string(hide_password=True),
        app_settings.db_pool_initial_capacity,
        app_settings.db_pool_max_capacity,
    )

    report = await database.setup_schema()
    if not report.ok:
        if app_settings.schema_fail_fast:
            await database.dispose()
            report.raise_for_errors()
        logger.error(
            "Continuing without table(s) %s; queries against them will fail",
            ", ".join(report.failed),
        )

    logger.info(
        "Schema ready: %d created, %d already present",
        len(report.created),
        len(report.existing),
    )

    logger.info(
        "Server ready at http://%s:%d",
        app_settings.backend_host,
        app_settings.backend_port,
    )
    logger.info(
        "API docs: http://%s:%d/docs",
        app_settings.backend_host,
        app_settings.backend_port,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Petstagram backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handlers are looked up by the exception's MRO, so ConflictError gets
    409 even though it is a StorageError. Server-side errors never expose
    their context in the response body; it is logged instead.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.info("[%s] Conflict: %s", rid, exc.message)
        return JSONResponse(
            status_code=409,
            content={
                "error": "conflict",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(PetstagramError)
    async def handle_application_error(request: Request, exc: PetstagramError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: defaults to the environment-derived singleton
        database: defaults to a new Database for app_settings. Creating the
                  engine does not connect; the first connection happens in
                  the lifespan's schema setup.
    """
    app_settings = app_settings or default_settings
    database = database or Database(app_settings)

    app = FastAPI(
        title="Petstagram API",
        description="Posts, likes, comments and credentials for the Petstagram sample app.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(posts.router)
    app.include_router(likes.router)
    app.include_router(comments.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


app = create_app()
