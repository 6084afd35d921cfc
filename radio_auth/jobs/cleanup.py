"""Out-of-band cleanup of password workflow state.

Deletes expired reset tokens and rate-limit records whose window closed more
than one window ago. Meant to run from cron or a scheduler::

    python -m radio_auth.jobs.cleanup

Neither step raises; failures are logged and counted as zero deletions.
"""

import asyncio
from typing import Dict

import structlog

from radio_auth.core.initialization import initialize_application
from radio_auth.core.rate_limiting import RateLimitingService
from radio_auth.domain.services.password_reset.reset_token_service import ResetTokenService
from radio_auth.infrastructure.database import engine, get_async_db
from radio_auth.infrastructure.repositories import RateLimitRepository, ResetTokenRepository

logger = structlog.get_logger(__name__)


async def run_cleanup(
    token_service: ResetTokenService, rate_limiting_service: RateLimitingService
) -> Dict[str, int]:
    """Run both cleanup steps and return the number of rows each removed."""
    tokens = await token_service.cleanup_expired()
    records = await rate_limiting_service.cleanup_expired_records()
    logger.info("Cleanup finished", expired_tokens=tokens, stale_rate_limit_records=records)
    return {"expired_tokens": tokens, "stale_rate_limit_records": records}


async def main() -> Dict[str, int]:
    async with get_async_db() as session:
        result = await run_cleanup(
            ResetTokenService(ResetTokenRepository(session)),
            RateLimitingService(RateLimitRepository(session)),
        )
    await engine.dispose()
    return result


if __name__ == "__main__":
    initialize_application()
    asyncio.run(main())
