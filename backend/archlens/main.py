"""
ArchLens Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn archlens.main:app`) and the test client.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │    GET    /api/analysis/{id}                        │
    │    GET    /api/analyses, GET|PATCH|DELETE /{id}     │
    │    POST   /api/blueprints/{id}/rate                 │
    │    GET    /api/dashboard                            │
    │    DELETE /api/projects/{id}                        │
    │    GET    /health                                   │
    │                                                     │
    │  Exception Handlers:                                │
    │    Validation→400  NotFound→404  RequestFailed→500  │
    │    Database→500    Exception→500                    │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate settings, log readiness
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from archlens import __version__
from archlens.config import settings
from archlens.database import dispose_engine
from archlens.exceptions import (
    ArchLensError,
    DatabaseError,
    NotFoundError,
    RequestFailedError,
    ValidationError,
)
from archlens.middleware.logging import RequestLoggingMiddleware
from archlens.middleware.request_id import RequestIDMiddleware, request_id_var
from archlens.routes import analyses, analysis, blueprints, dashboard, health, projects

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] archlens.routes.analysis: message
    Output goes to stdout so container runtimes collect it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup and shutdown procedures.

    A configuration problem is logged, not fatal: /health stays reachable
    and reports the database as disconnected.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("ArchLens Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("ArchLens Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(message: str, details: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and JSON bodies.

        ValidationError     → 400 {"error": message}
        NotFoundError       → 404 {"error": "<Resource> not found"}
        RequestFailedError  → 500 {"error": message, "details": cause?}
        DatabaseError       → 500 generic message
        ArchLensError       → 500 message
        Exception           → 500 generic message

    Every body also carries `request_id`. Stack traces are logged only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body(exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body(exc.message))

    @app.exception_handler(RequestFailedError)
    async def handle_request_failed(request: Request, exc: RequestFailedError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.details,
            exc.context,
        )
        return JSONResponse(status_code=500, content=_error_body(exc.message, exc.details))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("An internal error occurred. Please try again later."),
        )

    @app.exception_handler(ArchLensError)
    async def handle_archlens_error(request: Request, exc: ArchLensError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=_error_body(exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("An unexpected error occurred. Please try again or contact support."),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Middleware executes in reverse order of addition, so the request ID is
    assigned before the access logger reads it.
    """
    app = FastAPI(
        title="ArchLens API",
        description=(
            "Stored software-architecture analyses: lookup, listing, dashboard "
            "statistics, deletion, and blueprint rating."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(analysis.router)
    app.include_router(analyses.router)
    app.include_router(blueprints.router)
    app.include_router(dashboard.router)
    app.include_router(projects.router)
    app.include_router(health.router)

    return app


app = create_app()
