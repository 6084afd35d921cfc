from __future__ import annotations

from typing import Annotated, Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from radio_auth.core.exceptions import AuthenticationError
from radio_auth.domain.entities import Account
from radio_auth.domain.interfaces import IAccountRepository
from radio_auth.infrastructure.dependency_injection.auth_dependencies import (
    get_account_repository,
)
from radio_auth.utils.security import decode_session_token

__all__ = ["get_current_account", "CurrentAccount"]

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Type-annotated dependency shortcuts
# ---------------------------------------------------------------------------

BearerCredentials = Annotated[
    Optional[HTTPAuthorizationCredentials], Depends(HTTPBearer(auto_error=False))
]
AccountRepository = Annotated[IAccountRepository, Depends(get_account_repository)]


async def get_current_account(
    credentials: BearerCredentials, account_repository: AccountRepository
) -> Account:
    """Return the :class:`Account` named by the bearer session token.

    Raises:
        AuthenticationError: ``AUTH_REQUIRED`` when the header is missing or
            the token is invalid, ``SESSION_EXPIRED`` when it has expired,
            ``UNAUTHORIZED`` when the account no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required", code="AUTH_REQUIRED")

    account_id = decode_session_token(credentials.credentials)
    account = await account_repository.get_by_id(account_id)
    if account is None:
        logger.warning("Session refers to a missing account", user_id=account_id)
        raise AuthenticationError("Unauthorized", code="UNAUTHORIZED")
    return account


CurrentAccount = Annotated[Account, Depends(get_current_account)]
