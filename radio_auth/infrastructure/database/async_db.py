from __future__ import annotations

"""
Asynchronous database access.

Provides the async SQLAlchemy engine, the session factory, a session context
manager used by request dependencies and jobs, and a startup health check
with retries.

**Security Note**: Avoid logging the connection URL; it carries the database
password.

Key Components:
    - engine: The asynchronous SQLAlchemy engine.
    - AsyncSessionFactory: A factory for creating asynchronous database sessions.
    - get_async_db: A context manager yielding an async session.
    - ping: Single connectivity check.
    - check_database_health: Connectivity check with tenacity retries.
    - create_async_db_and_tables: Creates tables directly (tests and local runs).
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from radio_auth.core.config.settings import settings

logger = structlog.get_logger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool settings apply to server databases only; SQLite uses a static pool."""
    if make_url(url).get_backend_name() == "sqlite":
        return {}
    return {
        "pool_size": settings.POSTGRES_POOL_SIZE,
        "max_overflow": settings.POSTGRES_MAX_OVERFLOW,
        "pool_timeout": settings.POSTGRES_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


def build_engine(url: str = settings.DATABASE_URL) -> AsyncEngine:
    return create_async_engine(url, echo=False, future=True, **_engine_options(url))


engine = build_engine()

AsyncSessionFactory: sessionmaker[AsyncSession] = sessionmaker(  # type: ignore[type-arg]
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


@asynccontextmanager
async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yields an AsyncSession, rolling back on error and always closing it.

    Yields:
        AsyncSession: An asynchronous database session.
    """
    async with AsyncSessionFactory() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise
        finally:
            await session.close()
            logger.debug("Async database session closed")


async def ping(bind: AsyncEngine | None = None) -> None:
    """Run ``SELECT 1`` once; raises on any connection error."""
    async with (bind or engine).connect() as conn:
        await conn.execute(text("SELECT 1"))


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)
async def _ping_with_retry(bind: AsyncEngine) -> None:
    await ping(bind)


async def check_database_health(bind: AsyncEngine | None = None) -> bool:
    """
    Performs a health check on the database connection.

    Connection errors are retried with exponential backoff before the check
    gives up.

    Returns:
        bool: True if the database answered, False otherwise.
    """
    start_time = time.time()
    try:
        await _ping_with_retry(bind or engine)
    except Exception as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            execution_time=time.time() - start_time,
        )
        return False
    logger.info("database_health_check_success", execution_time=time.time() - start_time)
    return True


async def create_async_db_and_tables(bind: AsyncEngine | None = None) -> None:
    """
    Create tables using the async engine (mainly for test suites).
    """
    logger.info("Creating async database tables")
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")
