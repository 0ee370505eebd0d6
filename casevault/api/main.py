"""
FastAPI application with assembled routers.

Initializes the FastAPI app, wires application-lifetime components in
the lifespan handler, and launches uvicorn when run directly.

Dependencies: fastapi, casevault.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from casevault.api.deps.dependencies import get_service_cache
from casevault.boundary.db import create_tables, dispose_engine, get_async_engine
from casevault.configs import get_settings
from casevault.observability import configure_logging
from casevault.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import cases_router, documents_router, health_router, searches_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates missing tables and pre-builds the shared components on
    startup; cancels pending analysis timers and closes clients on
    shutdown.
    """
    settings = get_settings()
    if settings.database.create_tables_on_startup:
        await create_tables(get_async_engine())

    cache = get_service_cache()
    _ = cache.sync_engine
    logger.info("Service cache pre-warmed")

    yield

    await cache.aclose()
    await dispose_engine()
    logger.info("Service cache closed")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="CaseVault API",
        description="Document ingestion orchestration and search for legal discovery cases",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(cases_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(searches_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "casevault.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
