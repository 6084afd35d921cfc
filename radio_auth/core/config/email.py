"""Email configuration settings.

Defines the SMTP connection and sender identity used for password reset links
and password change/reset confirmations.
"""

from pathlib import Path
from typing import Optional

from pydantic import EmailStr, Field, SecretStr
from pydantic_settings import BaseSettings

_DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates" / "email"


class EmailSettings(BaseSettings):
    """Email configuration settings with secure defaults and validation.

    Security considerations:
    - SMTP credentials are handled as SecretStr to prevent logging
    - TLS is enabled by default

    Attributes:
        SMTP_HOST: SMTP server hostname
        SMTP_PORT: SMTP server port (587 for TLS, 465 for SSL)
        SMTP_USERNAME: SMTP authentication username
        SMTP_PASSWORD: SMTP authentication password (SecretStr)
        SMTP_USE_TLS: Enable STARTTLS
        SMTP_USE_SSL: Enable implicit SSL (alternative to TLS)
        FROM_EMAIL: Sender email address
        FROM_NAME: Sender display name
        SUPPORT_EMAIL: Contact address shown in security notices
        EMAIL_TEMPLATES_DIR: Directory containing email templates
        EMAIL_TEST_MODE: Log emails instead of sending them
    """

    SMTP_HOST: str = Field(default="smtp.gmail.com", description="SMTP server hostname")
    SMTP_PORT: int = Field(default=587, ge=1, le=65535)
    SMTP_USERNAME: Optional[str] = Field(default=None)
    SMTP_PASSWORD: Optional[SecretStr] = Field(default=None)
    SMTP_USE_TLS: bool = Field(default=True)
    SMTP_USE_SSL: bool = Field(default=False)

    FROM_EMAIL: EmailStr = Field(default="noreply@resistanceradio.org")
    FROM_NAME: str = Field(default="Resistance Radio")
    SUPPORT_EMAIL: EmailStr = Field(default="support@resistanceradio.org")

    EMAIL_TEMPLATES_DIR: str = Field(default=str(_DEFAULT_TEMPLATES_DIR))
    EMAIL_TEST_MODE: bool = Field(default=False)

    def validate_smtp_config(self) -> None:
        """Validate SMTP configuration for production use.

        Raises:
            ValueError: If SMTP configuration is incomplete or insecure
        """
        if self.EMAIL_TEST_MODE or getattr(self, "APP_ENV", "development") not in {"production", "staging"}:
            return

        if not self.SMTP_USERNAME or not self.SMTP_PASSWORD:
            raise ValueError("SMTP_USERNAME and SMTP_PASSWORD are required in production")

        if not (self.SMTP_USE_TLS or self.SMTP_USE_SSL):
            raise ValueError("Either SMTP_USE_TLS or SMTP_USE_SSL must be enabled for security")

        if self.SMTP_USE_TLS and self.SMTP_USE_SSL:
            raise ValueError("Cannot enable both SMTP_USE_TLS and SMTP_USE_SSL simultaneously")
