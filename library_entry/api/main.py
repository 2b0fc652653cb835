"""
FastAPI application for the library entry service.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from ..core.config import settings

logger = logging.getLogger("library.entry.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Library entry service starting on %s:%d", settings.server.host, settings.server.port)

    from ..entry import get_entry_service
    from ..storage import db_settings, init_database, close_database

    service = get_entry_service()
    service.tracker()  # Register the default space

    if db_settings.enabled:
        try:
            await init_database()
            restored = await service.restore_from_database()
            logger.info("Database initialized, %d events replayed", restored)
        except Exception as e:
            logger.warning("Database initialization failed, running in memory: %s", e)

    yield

    # Shutdown
    logger.info("Library entry service shutting down")
    await service.drain()

    if db_settings.enabled:
        try:
            await close_database()
            logger.info("Database closed")
        except Exception as e:
            logger.warning("Database close error: %s", e)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    application = FastAPI(
        title="Library Entry",
        description="Entry/exit confidence scoring and occupancy tracking",
        version=__version__,
        lifespan=lifespan,
    )

    # Include routers
    from .health import router as health_router
    from .entries import router as entries_router
    from .occupancy import router as occupancy_router

    application.include_router(health_router, tags=["health"])
    application.include_router(entries_router, prefix="/entries", tags=["entries"])
    application.include_router(occupancy_router, prefix="/occupancy", tags=["occupancy"])

    return application


# Create app instance
app = create_app()
