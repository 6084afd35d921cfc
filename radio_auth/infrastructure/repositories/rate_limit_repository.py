"""Rate limit repository over ``password_reset_rate_limits``."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from radio_auth.core.exceptions import DatabaseError
from radio_auth.domain.entities import RateLimitRecord
from radio_auth.domain.interfaces import IRateLimitRepository

logger = get_logger(__name__)


class RateLimitRepository(IRateLimitRepository):
    """SQLAlchemy implementation of :class:`IRateLimitRepository`.

    Counters are updated with single ``UPDATE`` statements; a lost update
    between concurrent requests costs at most one extra allowed attempt.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get(self, identifier: str) -> Optional[RateLimitRecord]:
        try:
            result = await self.db_session.execute(
                select(RateLimitRecord)
                .where(RateLimitRecord.email == identifier)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            logger.error("Error loading rate limit record", identifier=identifier, error=str(e))
            raise DatabaseError(f"Failed to load rate limit record: {e}") from e
        return result.scalars().first()

    async def create(self, identifier: str, now: datetime) -> RateLimitRecord:
        record = RateLimitRecord(email=identifier, attempt_count=0, window_start=now, created_at=now)
        try:
            self.db_session.add(record)
            await self.db_session.commit()
            await self.db_session.refresh(record)
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error("Error creating rate limit record", identifier=identifier, error=str(e))
            raise DatabaseError(f"Failed to create rate limit record: {e}") from e
        return record

    async def increment(self, identifier: str) -> None:
        await self._execute_write(
            update(RateLimitRecord)
            .where(RateLimitRecord.email == identifier)
            .values(attempt_count=RateLimitRecord.attempt_count + 1),
            "increment",
            identifier=identifier,
        )

    async def reset(self, identifier: str, now: datetime) -> None:
        await self._execute_write(
            update(RateLimitRecord)
            .where(RateLimitRecord.email == identifier)
            .values(attempt_count=1, window_start=now),
            "reset",
            identifier=identifier,
        )

    async def delete_stale(self, before: datetime) -> int:
        result = await self._execute_write(
            delete(RateLimitRecord).where(RateLimitRecord.window_start < before),
            "delete_stale",
        )
        return result.rowcount or 0

    async def _execute_write(self, statement, operation: str, **context):
        try:
            result = await self.db_session.execute(
                statement, execution_options={"synchronize_session": False}
            )
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error("Rate limit write failed", operation=operation, error=str(e), **context)
            raise DatabaseError(f"Rate limit {operation} failed: {e}") from e
        return result
