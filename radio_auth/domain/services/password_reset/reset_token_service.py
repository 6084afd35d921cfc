"""Password reset token lifecycle.

Tokens are 32 random bytes, hex encoded, hashed with the password bcrypt
context before they are stored. Because bcrypt salts every hash, a submitted
token cannot be looked up by equality; :meth:`ResetTokenService.verify` scans
the currently active tokens and checks each hash in turn. The candidate set
is bounded by outstanding, unexpired, unused tokens.
"""

import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from radio_auth.core.config.settings import settings
from radio_auth.domain.entities import PasswordResetToken
from radio_auth.domain.interfaces import IResetTokenRepository, IResetTokenService
from radio_auth.domain.value_objects import GeneratedResetToken
from radio_auth.utils.security import hash_password, verify_password
from radio_auth.utils.time import utc_now

logger = structlog.get_logger(__name__)


class ResetTokenService(IResetTokenService):
    """Generates, verifies and retires password reset tokens.

    Args:
        token_repository: Storage for hashed tokens
        token_bytes: Entropy of each secret in bytes
        expiry_minutes: Fixed lifetime of a token from generation
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        token_repository: IResetTokenRepository,
        token_bytes: int = settings.PASSWORD_RESET_TOKEN_BYTES,
        expiry_minutes: int = settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._repository = token_repository
        self._token_bytes = token_bytes
        self._expiry = timedelta(minutes=expiry_minutes)
        self._clock = clock

    def generate(self) -> GeneratedResetToken:
        """Generate a fresh secret and its hash. Nothing is persisted."""
        plaintext = secrets.token_hex(self._token_bytes)
        return GeneratedResetToken(
            plaintext=plaintext,
            token_hash=hash_password(plaintext),
            expires_at=self._clock() + self._expiry,
        )

    async def issue_for_account(self, account_id: int) -> GeneratedResetToken:
        """Generate a token for the account and persist its hash.

        Outstanding tokens are invalidated before the new one is inserted, so
        at most one token per account is redeemable.
        """
        token = self.generate()
        invalidated = await self.invalidate_for_account(account_id)
        record = await self._repository.create(
            account_id, token.token_hash, token.expires_at, self._clock()
        )
        logger.info(
            "Password reset token issued",
            user_id=account_id,
            token_id=record.id,
            token_prefix=token.mask_for_logging(),
            expires_at=token.expires_at.isoformat(),
            invalidated_tokens=invalidated,
        )
        return token

    async def find_matching_token(self, plaintext: str) -> Optional[PasswordResetToken]:
        """Return the active token record whose hash matches ``plaintext``."""
        if not plaintext:
            return None

        candidates = await self._repository.find_active(self._clock())
        for candidate in candidates:
            if verify_password(plaintext, candidate.token_hash):
                return candidate

        logger.debug(
            "No active reset token matched",
            token_prefix=f"{plaintext[:8]}...",
            candidates=len(candidates),
        )
        return None

    async def verify(self, plaintext: str) -> Optional[int]:
        record = await self.find_matching_token(plaintext)
        return record.user_id if record else None

    async def mark_used(self, token_id: int) -> bool:
        transitioned = await self._repository.mark_used(token_id, self._clock())
        if not transitioned:
            logger.warning("Reset token was already used", token_id=token_id)
        return transitioned

    async def redeem(self, token_id: int, account_id: int, password_hash: str) -> bool:
        """Mark the token used and store the new password hash together.

        Returns False, with nothing written, when another redemption claimed
        the token first or it expired in the meantime.
        """
        redeemed = await self._repository.redeem(
            token_id, account_id, password_hash, self._clock()
        )
        if not redeemed:
            logger.warning("Reset token was already redeemed", token_id=token_id, user_id=account_id)
        return redeemed

    async def invalidate_for_account(self, account_id: int) -> int:
        return await self._repository.invalidate_for_account(account_id, self._clock())

    async def cleanup_expired(self) -> int:
        """Delete expired token rows. Errors are logged, never raised."""
        try:
            deleted = await self._repository.delete_expired(self._clock())
        except Exception as e:
            logger.error("Error during reset token cleanup", error=str(e))
            return 0
        logger.info("Expired reset tokens deleted", deleted_count=deleted)
        return deleted
