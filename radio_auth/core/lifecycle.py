"""Application lifecycle management.

Startup verifies the database is reachable; the schema itself is managed by
Alembic. Shutdown disposes of the connection pool.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from radio_auth.core.config.settings import settings
from radio_auth.infrastructure.database import check_database_health, engine

logger = structlog.get_logger(__name__)


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Check the database on startup and release connections on shutdown.

        Raises:
            RuntimeError: If database is unavailable during startup
        """
        if not await check_database_health():
            logger.error("database_unavailable_on_startup")
            raise RuntimeError("Database unavailable")
        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        await engine.dispose()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
