from datetime import datetime, timezone
from typing import Annotated, Any, Dict

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from radio_auth.core.config.settings import settings
from radio_auth.infrastructure.database import ping

logger = structlog.get_logger(__name__)
router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    env: str
    services: Dict[str, Any]
    timestamp: datetime


async def get_database_status() -> Dict[str, Any]:
    """Single check, no retries, so the endpoint answers quickly when degraded."""
    try:
        await ping()
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return {"status": "unhealthy"}
    return {"status": "healthy"}


@router.get("/health", response_model=HealthResponse)
async def health_check(
    database: Annotated[Dict[str, Any], Depends(get_database_status)],
) -> HealthResponse:
    """Report whether the database behind the password workflow is reachable."""
    return HealthResponse(
        status="ok" if database["status"] == "healthy" else "degraded",
        env=settings.APP_ENV,
        services={"database": database},
        timestamp=datetime.now(timezone.utc),
    )
