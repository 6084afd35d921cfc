"""Reset token repository over ``password_reset_tokens``."""

from datetime import datetime
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from radio_auth.core.exceptions import DatabaseError
from radio_auth.domain.entities import Account, PasswordResetToken
from radio_auth.domain.interfaces import IResetTokenRepository

logger = get_logger(__name__)


class ResetTokenRepository(IResetTokenRepository):
    """SQLAlchemy implementation of :class:`IResetTokenRepository`.

    Each write commits on its own, except :meth:`redeem`, which claims the
    token and replaces the password hash in a single transaction.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def create(
        self, account_id: int, token_hash: str, expires_at: datetime, now: datetime
    ) -> PasswordResetToken:
        record = PasswordResetToken(
            user_id=account_id,
            token_hash=token_hash,
            expires_at=expires_at,
            created_at=now,
        )
        try:
            self.db_session.add(record)
            await self.db_session.commit()
            await self.db_session.refresh(record)
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error("Error creating reset token", user_id=account_id, error=str(e))
            raise DatabaseError(f"Failed to create reset token: {e}") from e
        return record

    async def find_active(self, now: datetime) -> List[PasswordResetToken]:
        statement = select(PasswordResetToken).where(
            PasswordResetToken.used_at.is_(None),
            PasswordResetToken.expires_at > now,
        ).execution_options(populate_existing=True)
        try:
            result = await self.db_session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Error loading active reset tokens", error=str(e))
            raise DatabaseError(f"Failed to load reset tokens: {e}") from e
        return list(result.scalars().all())

    async def mark_used(self, token_id: int, now: datetime) -> bool:
        statement = (
            update(PasswordResetToken)
            .where(PasswordResetToken.id == token_id, PasswordResetToken.used_at.is_(None))
            .values(used_at=now)
        )
        result = await self._execute_write(statement, "mark_used", token_id=token_id)
        return result.rowcount == 1

    async def redeem(
        self, token_id: int, account_id: int, password_hash: str, now: datetime
    ) -> bool:
        """Claim the token and write the password hash as one transaction.

        The conditional ``UPDATE`` on ``used_at`` takes the row lock, so a
        concurrent redemption of the same token waits and then matches no row.
        """
        claim = (
            update(PasswordResetToken)
            .where(
                PasswordResetToken.id == token_id,
                PasswordResetToken.user_id == account_id,
                PasswordResetToken.used_at.is_(None),
                PasswordResetToken.expires_at > now,
            )
            .values(used_at=now)
        )
        set_password = (
            update(Account)
            .where(Account.id == account_id)
            .values(password_hash=password_hash, updated_at=now)
        )
        try:
            result = await self.db_session.execute(
                claim, execution_options={"synchronize_session": False}
            )
            if result.rowcount != 1:
                await self.db_session.rollback()
                return False

            await self.db_session.execute(
                set_password, execution_options={"synchronize_session": False}
            )
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error(
                "Reset token write failed",
                operation="redeem",
                token_id=token_id,
                user_id=account_id,
                error=str(e),
            )
            raise DatabaseError(f"Reset token redeem failed: {e}") from e

        logger.info("Reset token redeemed", token_id=token_id, user_id=account_id)
        return True

    async def invalidate_for_account(self, account_id: int, now: datetime) -> int:
        statement = (
            update(PasswordResetToken)
            .where(PasswordResetToken.user_id == account_id, PasswordResetToken.used_at.is_(None))
            .values(used_at=now)
        )
        result = await self._execute_write(statement, "invalidate_for_account", user_id=account_id)
        return result.rowcount or 0

    async def delete_expired(self, now: datetime) -> int:
        statement = delete(PasswordResetToken).where(PasswordResetToken.expires_at < now)
        result = await self._execute_write(statement, "delete_expired")
        return result.rowcount or 0

    async def _execute_write(self, statement, operation: str, **context):
        try:
            result = await self.db_session.execute(
                statement, execution_options={"synchronize_session": False}
            )
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error("Reset token write failed", operation=operation, error=str(e), **context)
            raise DatabaseError(f"Reset token {operation} failed: {e}") from e
        return result
