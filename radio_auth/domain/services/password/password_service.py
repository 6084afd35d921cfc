"""Password Service.

Orchestrates the three password operations of the admin backend:

- authenticated password change
- password reset initiation (rate limited, enumeration resistant)
- password reset completion with a single-use token

Each public operation runs inside an audited block that logs its outcome and
duration and re-raises failures. Confirmation emails for a completed change
or reset are the caller's job; only the reset link email is sent here because
it carries the plaintext token.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

import structlog

from radio_auth.core.config.settings import settings
from radio_auth.core.exceptions import (
    AuthenticationError,
    InvalidCurrentPasswordError,
    InvalidTokenError,
    PasswordPolicyError,
    RateLimitExceededError,
)
from radio_auth.core.logging.audit import audited_operation
from radio_auth.core.rate_limiting.password_reset_service import normalize_identifier
from radio_auth.domain.entities import Account
from radio_auth.domain.interfaces import (
    IAccountRepository,
    IPasswordEmailService,
    IPasswordService,
    IRateLimitingService,
    IResetTokenService,
)
from radio_auth.domain.services.auth.password_policy import PasswordPolicyValidator
from radio_auth.utils.security import hash_password, verify_password
from radio_auth.utils.time import utc_now

logger = structlog.get_logger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists with this email, a password reset link has been sent"
PASSWORD_CHANGED_MESSAGE = "Password changed successfully"
PASSWORD_RESET_MESSAGE = "Password reset successfully"


class PasswordService(IPasswordService):
    """Service coordinating password changes and resets.

    Args:
        account_repository: Credential store access
        rate_limiting_service: Reset request ledger
        token_service: Reset token lifecycle
        email_service: Sends the reset link
        policy: Password policy validator
        allowed_reset_roles: Roles allowed to use the admin reset flow
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        account_repository: IAccountRepository,
        rate_limiting_service: IRateLimitingService,
        token_service: IResetTokenService,
        email_service: IPasswordEmailService,
        policy: Optional[PasswordPolicyValidator] = None,
        allowed_reset_roles: Optional[Sequence[str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._account_repository = account_repository
        self._rate_limiting_service = rate_limiting_service
        self._token_service = token_service
        self._email_service = email_service
        self._policy = policy or PasswordPolicyValidator()
        self._allowed_reset_roles = list(
            allowed_reset_roles
            if allowed_reset_roles is not None
            else settings.PASSWORD_RESET_ALLOWED_ROLES
        )
        self._clock = clock

    async def change_password(
        self, account_id: int, current_password: str, new_password: str
    ) -> Account:
        """Change the password of an authenticated account.

        Args:
            account_id: Id from the caller's session
            current_password: Must match the stored hash
            new_password: Must satisfy the policy

        Returns:
            Account: The account, with its new password hash

        Raises:
            AuthenticationError: If the account no longer exists
            InvalidCurrentPasswordError: If ``current_password`` is wrong
            PasswordPolicyError: If ``new_password`` violates the policy
        """
        async with audited_operation(
            logger, "password_change", "Password change failed", account_id=account_id
        ) as audit:
            account = await self._account_repository.get_by_id(account_id)
            if account is None:
                raise AuthenticationError("Unauthorized", code="UNAUTHORIZED")
            audit.bind(email=account.email)

            if not verify_password(current_password, account.password_hash):
                raise InvalidCurrentPasswordError()

            self._validate_new_password(new_password, account.email)
            await self._update_password(account, new_password)

            audit.succeed("Password changed")
            return account

    async def initiate_password_reset(self, email: str) -> Dict[str, Any]:
        """Start a password reset for an email address.

        Only a rate limit violation is visible to the caller. Unknown emails,
        accounts outside the allowed roles and email delivery failures all
        produce the same success response.

        Raises:
            RateLimitExceededError: If the email has used up its requests
        """
        normalized = normalize_identifier(email)
        async with audited_operation(
            logger, "password_reset_request", "Password reset request failed", email=normalized
        ) as audit:
            decision = await self._rate_limiting_service.check_rate_limit(normalized)
            if not decision.allowed:
                raise RateLimitExceededError(decision.retry_after_seconds)

            await self._rate_limiting_service.record_attempt(normalized)

            account = await self._account_repository.get_by_email(
                normalized, roles=self._allowed_reset_roles
            )
            if account is not None:
                audit.bind(account_id=account.id)
                await self._issue_and_send_token(account)

            audit.succeed("Password reset requested", email_exists=account is not None)
            return self._create_success_response(RESET_REQUESTED_MESSAGE)

    async def complete_password_reset(self, token: str, new_password: str) -> Account:
        """Redeem a reset token and set a new password.

        The token is verified first. Marking it used and writing the new hash
        happen together, so of two concurrent completions with one token only
        one succeeds.

        Returns:
            Account: The account whose password was reset

        Raises:
            InvalidTokenError: For an unknown, expired or used token, or one
                whose account no longer exists
            PasswordPolicyError: If ``new_password`` violates the policy
        """
        async with audited_operation(
            logger, "password_reset_complete", "Password reset completion failed"
        ) as audit:
            record = await self._token_service.find_matching_token(token)
            if record is None:
                raise InvalidTokenError()
            audit.bind(account_id=record.user_id)

            account = await self._account_repository.get_by_id(record.user_id)
            if account is None:
                raise InvalidTokenError()
            audit.bind(email=account.email)

            self._validate_new_password(new_password, account.email)
            new_hash = hash_password(new_password)
            if not await self._token_service.redeem(record.id, account.id, new_hash):
                raise InvalidTokenError()
            account.password_hash = new_hash
            account.updated_at = self._clock()

            audit.succeed("Password reset completed")
            return account

    def _validate_new_password(self, password: str, email: str) -> None:
        result = self._policy.validate(password, email)
        if not result.is_valid:
            raise PasswordPolicyError(result.errors)

    async def _update_password(self, account: Account, new_password: str) -> None:
        now = self._clock()
        new_hash = hash_password(new_password)
        await self._account_repository.update_password_hash(account.id, new_hash, now)
        account.password_hash = new_hash
        account.updated_at = now

    async def _issue_and_send_token(self, account: Account) -> None:
        """Issue a token and email it. Delivery failures are logged only."""
        token = await self._token_service.issue_for_account(account.id)
        try:
            await self._email_service.send_password_reset_email(account, token.plaintext)
        except Exception as e:
            logger.error(
                "Failed to send password reset email",
                user_id=account.id,
                token_prefix=token.mask_for_logging(),
                error=str(e),
            )

    @staticmethod
    def _create_success_response(message: str) -> Dict[str, Any]:
        return {"message": message, "status": "success"}
