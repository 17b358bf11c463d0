"""
FastAPI application entry point for the roofing analytics API.

This module wires the analytics core into an ASGI app: it configures logging
and CORS, opens the asyncpg pool and ensures the analytics schema at startup,
places the AnalyticsStore on app.state for the dependency layer, and registers
the API routers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import asyncpg
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roof_analytics import __version__
from roof_analytics.api import api_router
from roof_analytics.core.config import get_settings
from roof_analytics.core.database import close_db, init_db
from roof_analytics.core.exceptions import StoreError
from roof_analytics.core.store import PostgresAnalyticsStore

settings = get_settings()

# Root logger; level from LOG_LEVEL
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the pool, ensure the analytics schema and publish the store.

    A database that is unreachable at startup is logged, not fatal:
    get_store opens the pool on the first request that needs it. The pool is
    closed on shutdown.
    """
    # Startup
    logger.info("Roof Analytics API starting")
    try:
        pool = await init_db()
        store = PostgresAnalyticsStore(pool)
        await store.ensure_schema()
        app.state.store = store
        logger.info("Analytics store ready")
    except (StoreError, asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        logger.error(f"Analytics store unavailable at startup: {e}")

    yield

    # Shutdown
    logger.info("Roof Analytics API shutting down")
    await close_db()


# Application
app = FastAPI(
    title="Roof Analytics API",
    version=__version__,
    description=(
        "Analytics backend for a roofing business: lead, project, customer and "
        "weather impact analytics, placeholder predictions, time-based "
        "aggregates and dashboard reporting."
    ),
    lifespan=lifespan,
)

# The dashboard frontend calls from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Liveness probe. Does not touch the database."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Service name, version and documentation links."""
    return {
        "name": "Roof Analytics API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Development server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "roof_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
