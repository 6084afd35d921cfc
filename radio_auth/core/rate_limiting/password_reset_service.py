"""Rate Limiting Service for Password Reset requests.

Caps reset requests per normalized email address to a fixed number within a
window that opens at the first attempt. Checking and recording are separate
steps so that the caller can record every attempt past the check, whether or
not the email belongs to an account.
"""

import math
from datetime import datetime, timedelta
from typing import Callable

import structlog

from radio_auth.core.config.settings import settings
from radio_auth.domain.interfaces import IRateLimitingService, IRateLimitRepository
from radio_auth.domain.value_objects import RateLimitDecision
from radio_auth.utils.time import utc_now

logger = structlog.get_logger(__name__)


def normalize_identifier(identifier: str) -> str:
    return (identifier or "").strip().lower()


class RateLimitingService(IRateLimitingService):
    """Ledger-backed rate limiting for password reset requests.

    Both operations fail open: a storage error while checking allows the
    request, and a storage error while recording is logged and swallowed.
    """

    def __init__(
        self,
        repository: IRateLimitRepository,
        max_attempts: int = settings.PASSWORD_RESET_RATE_LIMIT_MAX_ATTEMPTS,
        window_minutes: int = settings.PASSWORD_RESET_RATE_LIMIT_WINDOW_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._repository = repository
        self._max_attempts = max_attempts
        self._window = timedelta(minutes=window_minutes)
        self._clock = clock

    async def check_rate_limit(self, identifier: str) -> RateLimitDecision:
        """Check if another reset request is allowed for the identifier.

        Args:
            identifier: Email address, normalized before use

        Returns:
            RateLimitDecision: allowed, or blocked with the seconds left in the window
        """
        key = normalize_identifier(identifier)
        try:
            now = self._clock()
            record = await self._repository.get(key)
            if record is None:
                record = await self._repository.create(key, now)

            if record.window_expired(now, self._window):
                return RateLimitDecision.allow()

            if record.attempt_count < self._max_attempts:
                return RateLimitDecision.allow()

            # Still inside the window, so the remainder is strictly positive.
            remaining = record.window_ends_at(self._window) - now
            retry_after = math.ceil(remaining.total_seconds())
            logger.info(
                "Password reset rate limit reached",
                identifier=key,
                attempt_count=record.attempt_count,
                retry_after_seconds=retry_after,
            )
            return RateLimitDecision.block(retry_after)

        except Exception as e:
            logger.error("Error checking rate limit", identifier=key, error=str(e))
            return RateLimitDecision.allow()

    async def record_attempt(self, identifier: str) -> None:
        """Record a reset attempt, starting a new window if the old one lapsed.

        Args:
            identifier: Email address, normalized before use
        """
        key = normalize_identifier(identifier)
        try:
            now = self._clock()
            record = await self._repository.get(key)
            if record is None or record.window_expired(now, self._window):
                if record is None:
                    await self._repository.create(key, now)
                await self._repository.reset(key, now)
            else:
                await self._repository.increment(key)

            logger.debug("Rate limit attempt recorded", identifier=key, timestamp=now.isoformat())

        except Exception as e:
            logger.error("Error recording rate limit attempt", identifier=key, error=str(e))

    async def cleanup_expired_records(self) -> int:
        """Delete records whose window started more than one window ago.

        Returns:
            int: Number of records deleted
        """
        try:
            cutoff = self._clock() - self._window
            deleted = await self._repository.delete_stale(cutoff)
            logger.info(
                "Rate limit cleanup completed",
                cleaned_count=deleted,
                cutoff=cutoff.isoformat(),
            )
            return deleted
        except Exception as e:
            logger.error("Error during rate limit cleanup", error=str(e))
            return 0
