"""
Application-specific settings.
"""
from typing import List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, debug mode and CORS origins.

    Security Note:
        - Ensure ALLOWED_ORIGINS is explicitly set to the admin frontend domain in
          production to prevent unauthorized cross-origin requests.
        - FRONTEND_URL is embedded in password reset links; it must point at the
          real admin frontend or reset emails will send users elsewhere.
    """
    PROJECT_NAME: str = "radio-auth"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    API_HOST: str = "0.0.0.0"
    API_PORT: int = Field(ge=1, le=65535, default=8000)
    API_PREFIX: str = "/api"

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    ALLOWED_ORIGINS: Union[str, List[str]] = Field(default="http://localhost:5173")
    FRONTEND_URL: str = "https://resistanceradio.org"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string of origins into a list.

        Args:
            v: Input value as a string or list of origins.

        Returns:
            List of stripped origin strings.
        """
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    @field_validator("FRONTEND_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")
