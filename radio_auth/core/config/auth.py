"""Authentication, password hashing and password reset settings.
"""

import logging
from typing import List, Union

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Defines settings for admin sessions, password hashing and the reset workflow.

    Security Note:
        - JWT_SECRET signs admin session tokens; it must be a long random value
          in production and never be committed or logged.
        - BCRYPT_WORK_FACTOR below 10 is rejected. Raising it slows every password
          and reset-token verification, including the linear token scan.
    """

    # Admin session tokens
    JWT_SECRET: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-in-production-0123456789"),
    )
    JWT_ALGORITHM: str = "HS256"
    SESSION_DURATION_HOURS: int = Field(ge=1, default=24)

    # Adaptive hashing
    BCRYPT_WORK_FACTOR: int = Field(ge=10, le=16, default=10)

    # Reset tokens
    PASSWORD_RESET_TOKEN_BYTES: int = Field(ge=32, default=32)
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = Field(ge=1, le=1440, default=60)

    # Reset request throttling (per normalized email)
    PASSWORD_RESET_RATE_LIMIT_MAX_ATTEMPTS: int = Field(ge=1, default=3)
    PASSWORD_RESET_RATE_LIMIT_WINDOW_MINUTES: int = Field(ge=1, default=15)

    # Roles allowed to use the admin reset flow
    PASSWORD_RESET_ALLOWED_ROLES: Union[str, List[str]] = Field(
        default=["content_manager", "administrator"]
    )

    @field_validator("JWT_SECRET")
    @classmethod
    def _validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if len(v.get_secret_value()) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters long")
        return v

    @field_validator("PASSWORD_RESET_ALLOWED_ROLES", mode="before")
    @classmethod
    def _split_roles(cls, v: Union[str, List[str]]) -> List[str]:
        """Accepts a comma-separated string from the environment."""
        if isinstance(v, str):
            return [role.strip() for role in v.split(",") if role.strip()]
        return v
