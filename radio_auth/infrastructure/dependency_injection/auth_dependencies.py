"""Dependency factories for the password workflow.

FastAPI builds one repository set per request around a single database
session; the email service is stateless and shared. Tests replace any of
these through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from radio_auth.core.rate_limiting import RateLimitingService
from radio_auth.domain.interfaces import (
    IAccountRepository,
    IPasswordEmailService,
    IPasswordService,
    IRateLimitingService,
    IRateLimitRepository,
    IResetTokenRepository,
    IResetTokenService,
)
from radio_auth.domain.services.password.password_service import PasswordService
from radio_auth.domain.services.password_reset.reset_token_service import ResetTokenService
from radio_auth.infrastructure.database.async_db import get_async_db
from radio_auth.infrastructure.repositories import (
    AccountRepository,
    RateLimitRepository,
    ResetTokenRepository,
)
from radio_auth.infrastructure.services.email import PasswordEmailService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session."""
    async with get_async_db() as session:
        yield session


AsyncDB = Annotated[AsyncSession, Depends(get_db)]

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------


def get_account_repository(db: AsyncDB) -> IAccountRepository:
    return AccountRepository(db)


def get_reset_token_repository(db: AsyncDB) -> IResetTokenRepository:
    return ResetTokenRepository(db)


def get_rate_limit_repository(db: AsyncDB) -> IRateLimitRepository:
    return RateLimitRepository(db)


@lru_cache
def get_email_service() -> IPasswordEmailService:
    """Shared email service; templates and SMTP config are loaded once."""
    return PasswordEmailService()


# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def get_rate_limiting_service(
    repository: Annotated[IRateLimitRepository, Depends(get_rate_limit_repository)],
) -> IRateLimitingService:
    return RateLimitingService(repository)


def get_reset_token_service(
    repository: Annotated[IResetTokenRepository, Depends(get_reset_token_repository)],
) -> IResetTokenService:
    return ResetTokenService(repository)


def get_password_service(
    account_repository: Annotated[IAccountRepository, Depends(get_account_repository)],
    rate_limiting_service: Annotated[IRateLimitingService, Depends(get_rate_limiting_service)],
    token_service: Annotated[IResetTokenService, Depends(get_reset_token_service)],
    email_service: Annotated[IPasswordEmailService, Depends(get_email_service)],
) -> IPasswordService:
    """Factory that returns the password workflow orchestrator.

    Args:
        account_repository: Credential store access
        rate_limiting_service: Reset request ledger
        token_service: Reset token lifecycle
        email_service: Email notifications

    Returns:
        IPasswordService: Configured password service
    """
    return PasswordService(
        account_repository=account_repository,
        rate_limiting_service=rate_limiting_service,
        token_service=token_service,
        email_service=email_service,
    )


PasswordServiceDep = Annotated[IPasswordService, Depends(get_password_service)]
EmailServiceDep = Annotated[IPasswordEmailService, Depends(get_email_service)]
