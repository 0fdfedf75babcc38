"""FastAPI application factory.

Main entry point for the CodeTrain Web API.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from codetrain import __version__
from codetrain.config.app_config import AppConfig, load_app_config
from codetrain.core.catalog import load_catalog
from codetrain.db.database import Database
from codetrain.db.modules_repository import sync_modules
from codetrain.web.errors import register_exception_handlers
from codetrain.web.routes import (
    auth_router,
    frontend_router,
    health_router,
    modules_router,
    progress_router,
)
from codetrain.web.sessions import SessionManager, create_session_store

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open process-lifetime resources on startup, release them on shutdown."""
    config: AppConfig = app.state.config

    db = Database(config.database_path, busy_timeout=config.busy_timeout_seconds)
    db.init()

    catalog = load_catalog(config.catalog_path)
    sync_modules(db, catalog.list_modules())

    sessions = SessionManager(
        create_session_store(config),
        secret=config.session_secret,
        ttl_seconds=config.session_ttl_seconds,
    )

    app.state.db = db
    app.state.catalog = catalog
    app.state.sessions = sessions

    logger.info(
        "api_startup",
        environment=config.environment,
        public_url=config.public_url,
        database=str(db.path),
        modules=len(catalog),
    )
    try:
        yield
    finally:
        await sessions.close()
        logger.info("api_shutdown")


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use. Defaults to load_app_config().

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()

    app = FastAPI(
        title="CodeTrain API",
        description="Student training platform: accounts, learning modules and progress",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_origin_regex=config.allowed_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return response

    register_exception_handlers(app)

    # Include routers; the front-end catch-all must stay last
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(modules_router)
    app.include_router(progress_router)
    app.include_router(frontend_router)

    return app
