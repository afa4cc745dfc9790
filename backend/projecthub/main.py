"""
ProjectHub Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       uvicorn serves the module-level `app` (uvicorn projecthub.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:   CORS → GZip → Request ID                  │
    │                                                          │
    │  Routes (each wrapped by with_error_handler):            │
    │    /api/health   /api/notifications   /api/forgot-password│
    │                                                          │
    │  Exception handlers: same envelope as the route wrapper  │
    │    for errors raised in dependencies or validation       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize structured logging
    2. Validate configuration (errors and warnings are logged)
    3. Create missing tables
    4. Start the rate-limit sweeper (not in the test environment)

    Shutdown:
    1. Stop the sweeper
    2. Dispose database engine (close all connections)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from projecthub import __version__
from projecthub.config import settings
from projecthub.database import create_tables, dispose_engine
from projecthub.error_handler import register_exception_handlers
from projecthub.logger import setup_logging
from projecthub.middleware.rate_limit import RateLimitSweeper
from projecthub.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from projecthub.routes import auth, health, notifications

logger = logging.getLogger(__name__)


def check_configuration() -> bool:
    """Log every configuration problem; returns False when any is an error."""
    report = settings.validate_environment()
    for warning in report.warnings:
        logger.warning("Configuration warning: %s", warning)
    for error in report.errors:
        logger.error("Configuration error: %s", error)
    return report.valid


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("ProjectHub Backend %s starting up (%s)", __version__, settings.environment)

    # Misconfiguration is reported, not fatal: health checks stay reachable
    if not check_configuration():
        logger.error("Fix the configuration and restart the server.")

    await create_tables()

    sweeper = RateLimitSweeper()
    if settings.environment != "test":
        sweeper.start()
    app.state.rate_limit_sweeper = sweeper

    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ProjectHub Backend shutting down...")
    await sweeper.stop()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routes."""
    app = FastAPI(
        title="ProjectHub API",
        description="Project management backend: notifications, password reset and health.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            REQUEST_ID_HEADER,
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(notifications.router)
    app.include_router(auth.router)

    return app


app = create_app()
