# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the portal API.

Example:
    uvicorn eduportal.api.app:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from eduportal import __version__
from eduportal.api.errors import register_exception_handlers
from eduportal.api.middleware.rate_limit import limiter
from eduportal.api.middleware.request_context import RequestContextMiddleware
from eduportal.api.routes import health
from eduportal.api.v1 import router as v1_router
from eduportal.core.config import Settings, get_settings
from eduportal.infrastructure.database.connection import close_database, init_database
from eduportal.infrastructure.database.migrations.runner import run_migrations
from eduportal.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging, brings the schema up to date and opens the
    connection pool on startup; closes the pool on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info(
        "Starting portal API: environment=%s debug=%s",
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================
    db = settings.database
    if db.auto_migrate and not db.is_sqlite:
        revision = await run_migrations(db.url)
        logger.info("Database schema at revision %s", revision)

    await init_database(settings, create_schema=db.auto_migrate and db.is_sqlite)
    logger.info("Database connection initialized")

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================
    try:
        await close_database()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down portal API")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Args:
        settings: Settings to run with. Defaults to the cached environment
            settings; when given, they also replace get_settings() for
            every request dependency.

    Returns:
        Configured FastAPI application instance.
    """
    explicit_settings = settings is not None
    settings = settings or get_settings()

    app = FastAPI(
        title="Education Portal API",
        description="Accounts, sessions and parent-student links",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Disable automatic redirects from /path to /path/
        # This prevents 307 redirects that lose Authorization headers
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.settings = settings
    app.state.limiter = limiter
    limiter.enabled = settings.rate_limit.enabled
    if explicit_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    # =========================================================================
    # Exception handlers
    # =========================================================================
    register_exception_handlers(app)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================
    # Default per-client limit on every route not decorated or exempted
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(RequestContextMiddleware)

    # CORS middleware (should be last to execute first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router, prefix=settings.api.prefix)

    return app
