"""Account repository over the shared ``users`` table.

Only reads accounts and replaces password hashes; every other column is
owned by the account-management side of the backend.
"""

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from radio_auth.core.exceptions import DatabaseError
from radio_auth.domain.entities import Account
from radio_auth.domain.interfaces import IAccountRepository

logger = get_logger(__name__)


class AccountRepository(IAccountRepository):
    """SQLAlchemy implementation of :class:`IAccountRepository`.

    Args:
        db_session: SQLAlchemy async session for database operations
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_by_id(self, account_id: int) -> Optional[Account]:
        try:
            result = await self.db_session.execute(
                select(Account)
                .where(Account.id == account_id)
                .execution_options(populate_existing=True)
            )
            account = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(
                "Error retrieving account by ID",
                user_id=account_id,
                error=str(e),
                operation="get_by_id",
            )
            raise DatabaseError(f"Failed to load account: {e}") from e

        logger.debug("Account lookup by ID completed", user_id=account_id, found=account is not None)
        return account

    async def get_by_email(
        self, email: str, roles: Optional[Sequence[str]] = None
    ) -> Optional[Account]:
        """Get an account by email, ignoring case.

        Args:
            email: Address to look up
            roles: Restrict the match to accounts holding one of these roles

        Returns:
            Account entity if found, None otherwise
        """
        statement = (
            select(Account)
            .where(func.lower(Account.email) == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        if roles is not None:
            statement = statement.where(Account.role.in_(list(roles)))

        try:
            result = await self.db_session.execute(statement)
            account = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Error retrieving account by email", error=str(e), operation="get_by_email")
            raise DatabaseError(f"Failed to load account: {e}") from e

        logger.debug(
            "Account lookup by email completed",
            found=account is not None,
            role_filtered=roles is not None,
        )
        return account

    async def update_password_hash(
        self, account_id: int, password_hash: str, now: datetime
    ) -> None:
        statement = (
            update(Account)
            .where(Account.id == account_id)
            .values(password_hash=password_hash, updated_at=now)
        )
        try:
            await self.db_session.execute(statement)
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error(
                "Error updating password hash",
                user_id=account_id,
                error=str(e),
                operation="update_password_hash",
            )
            raise DatabaseError(f"Failed to update password: {e}") from e

        logger.info("Password hash updated", user_id=account_id)
