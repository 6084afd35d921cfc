"""Email notifications for the password workflow.

Renders HTML templates with Jinja2 and delivers them through fastapi-mail.
In test mode (always on in development and test environments) the rendered
message is logged instead of sent.

Security Features:
- HTML escaping by default to prevent XSS
- Recipient addresses are masked in logs
- The reset token appears in the rendered link only, never in a log line
"""

import html
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, TemplateError

from radio_auth.core.config.settings import settings
from radio_auth.core.exceptions import EmailServiceError
from radio_auth.domain.entities import Account
from radio_auth.domain.interfaces import IPasswordEmailService
from radio_auth.utils.time import utc_now

logger = structlog.get_logger(__name__)


def mask_email(email: str) -> str:
    """``jdoe@example.org`` becomes ``jdo***@example.org``."""
    if not email or "@" not in email:
        return "unknown"
    username, domain = email.split("@", 1)
    if len(username) <= 3:
        return f"{username}@{domain}"
    return f"{username[:3]}***@{domain}"


class PasswordEmailService(IPasswordEmailService):
    """Sends reset links and password change/reset confirmations.

    Attributes:
        jinja_env: Jinja2 environment for template rendering
        fastmail: FastMail client, None in test mode
    """

    RESET_SUBJECT = "Password Reset Request - Resistance Radio"
    CHANGED_SUBJECT = "Your Password Was Changed - Resistance Radio"
    RESET_CONFIRMATION_SUBJECT = "Password Reset Successful - Resistance Radio"

    def __init__(
        self,
        templates_dir: Optional[str] = None,
        test_mode: Optional[bool] = None,
        fastmail: Optional[FastMail] = None,
    ):
        self._test_mode = settings.EMAIL_TEST_MODE if test_mode is None else test_mode
        self._setup_template_environment(templates_dir or settings.EMAIL_TEMPLATES_DIR)
        self.fastmail = fastmail if fastmail is not None else self._setup_smtp_client()

    def is_test_mode(self) -> bool:
        return self._test_mode

    def _setup_template_environment(self, templates_dir: str) -> None:
        template_dir = Path(templates_dir)
        if not template_dir.is_dir():
            raise EmailServiceError(f"Email templates directory not found: {template_dir}")

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.jinja_env.filters["format_datetime"] = self._format_datetime_filter
        self.jinja_env.filters["mask_email"] = mask_email

    def _setup_smtp_client(self) -> Optional[FastMail]:
        """Configure FastMail, or nothing when emails are only logged."""
        if self._test_mode:
            logger.info("Email service in test mode - emails will be logged")
            return None

        try:
            config = ConnectionConfig(
                MAIL_USERNAME=settings.SMTP_USERNAME or "",
                MAIL_PASSWORD=(
                    settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else ""
                ),
                MAIL_FROM=settings.FROM_EMAIL,
                MAIL_FROM_NAME=settings.FROM_NAME,
                MAIL_PORT=settings.SMTP_PORT,
                MAIL_SERVER=settings.SMTP_HOST,
                MAIL_STARTTLS=settings.SMTP_USE_TLS,
                MAIL_SSL_TLS=settings.SMTP_USE_SSL,
                USE_CREDENTIALS=bool(settings.SMTP_USERNAME and settings.SMTP_PASSWORD),
                VALIDATE_CERTS=True,
            )
            return FastMail(config)
        except Exception as e:
            logger.error("Failed to configure FastMail", error=str(e))
            raise EmailServiceError(f"Failed to configure email service: {e}") from e

    async def send_password_reset_email(self, account: Account, token: str) -> bool:
        """Send the reset link for a freshly issued token.

        Args:
            account: Recipient account
            token: Plaintext reset token, embedded in the link only

        Raises:
            EmailServiceError: If rendering or delivery fails
        """
        expiry_minutes = settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
        context = self._base_context(account)
        context.update(
            reset_url=self.build_reset_url(token),
            expires_in_text=self._describe_minutes(expiry_minutes),
        )
        return await self._send_template(
            account, self.RESET_SUBJECT, "password_reset.html", context
        )

    async def send_password_changed_email(self, account: Account) -> bool:
        context = self._base_context(account)
        context["changed_at"] = account.updated_at or utc_now()
        return await self._send_template(
            account, self.CHANGED_SUBJECT, "password_changed.html", context
        )

    async def send_password_reset_confirmation_email(self, account: Account) -> bool:
        context = self._base_context(account)
        context["changed_at"] = account.updated_at or utc_now()
        return await self._send_template(
            account,
            self.RESET_CONFIRMATION_SUBJECT,
            "password_reset_confirmation.html",
            context,
        )

    @staticmethod
    def build_reset_url(token: str) -> str:
        return f"{settings.FRONTEND_URL}/reset-password?token={token}"

    def _base_context(self, account: Account) -> Dict[str, Any]:
        return {
            "app_name": settings.FROM_NAME,
            "user_name": account.full_name or account.email.split("@")[0],
            "email": account.email,
            "support_email": settings.SUPPORT_EMAIL,
            "year": utc_now().year,
        }

    async def _send_template(
        self, account: Account, subject: str, template_name: str, context: Dict[str, Any]
    ) -> bool:
        try:
            html_content = self.jinja_env.get_template(template_name).render(**context)
        except TemplateError as e:
            logger.error("Template rendering failed", template=template_name, error=str(e))
            raise EmailServiceError(f"Template rendering failed: {e}") from e

        return await self._send_email(account.email, subject, html_content)

    async def _send_email(self, to_email: str, subject: str, html_content: str) -> bool:
        if self._test_mode:
            logger.info(
                "Email sent in test mode",
                to_email=mask_email(to_email),
                subject=subject,
                html_length=len(html_content),
                text_length=len(self._html_to_text(html_content)),
            )
            return True

        if not self.fastmail:
            raise EmailServiceError("FastMail not configured for production mode")

        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=html_content,
            subtype=MessageType.html,
        )
        try:
            await self.fastmail.send_message(message)
        except Exception as e:
            logger.error(
                "Failed to send email",
                to_email=mask_email(to_email),
                subject=subject,
                error=str(e),
            )
            raise EmailServiceError(f"Failed to send email: {e}") from e

        logger.info("Email sent successfully", to_email=mask_email(to_email), subject=subject)
        return True

    @staticmethod
    def _describe_minutes(minutes: int) -> str:
        if minutes % 60 == 0:
            hours = minutes // 60
            return "1 hour" if hours == 1 else f"{hours} hours"
        return f"{minutes} minutes"

    @staticmethod
    def _format_datetime_filter(value: Optional[datetime], format_string: str = "%Y-%m-%d %H:%M") -> str:
        if value is None:
            return ""
        return value.strftime(format_string)

    @staticmethod
    def _html_to_text(html_content: str) -> str:
        text = re.sub(r"<style.*?</style>", "", html_content, flags=re.DOTALL)
        text = re.sub(r"<[^>]+>", "", text)
        return re.sub(r"\s+", " ", html.unescape(text)).strip()
