from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from radio_auth.core.config.settings import settings
from radio_auth.core.exceptions import EmailServiceError
from radio_auth.infrastructure.services.email.password_email_service import (
    PasswordEmailService,
    mask_email,
)

TOKEN = "ab" * 32


@pytest.fixture
def fastmail():
    return AsyncMock()


@pytest.fixture
def smtp_service(fastmail):
    return PasswordEmailService(test_mode=False, fastmail=fastmail)


@pytest.mark.parametrize(
    "email,expected",
    [
        ("editor@resistanceradio.org", "edi***@resistanceradio.org"),
        ("al@resistanceradio.org", "al@resistanceradio.org"),
        ("", "unknown"),
        ("not-an-email", "unknown"),
    ],
)
def test_mask_email(email, expected):
    assert mask_email(email) == expected


def test_reset_url_points_at_frontend():
    url = PasswordEmailService.build_reset_url(TOKEN)

    assert url == f"{settings.FRONTEND_URL}/reset-password?token={TOKEN}"


def test_missing_templates_directory(tmp_path):
    with pytest.raises(EmailServiceError):
        PasswordEmailService(templates_dir=str(tmp_path / "missing"), test_mode=True)


@pytest.mark.asyncio
async def test_test_mode_logs_without_token(admin_account):
    service = PasswordEmailService(test_mode=True)

    with capture_logs() as logs:
        sent = await service.send_password_reset_email(admin_account, TOKEN)

    assert sent is True
    assert service.fastmail is None
    assert any(entry["event"] == "Email sent in test mode" for entry in logs)
    assert TOKEN not in repr(logs)
    assert admin_account.email not in repr(logs)


@pytest.mark.asyncio
async def test_reset_email_contains_link_and_expiry(smtp_service, fastmail, admin_account):
    await smtp_service.send_password_reset_email(admin_account, TOKEN)

    message = fastmail.send_message.call_args.args[0]
    assert message.subject == PasswordEmailService.RESET_SUBJECT
    assert [recipient.email for recipient in message.recipients] == [admin_account.email]
    assert PasswordEmailService.build_reset_url(TOKEN) in message.body
    assert "1 hour" in message.body


@pytest.mark.asyncio
async def test_changed_email_subject(smtp_service, fastmail, admin_account):
    await smtp_service.send_password_changed_email(admin_account)

    message = fastmail.send_message.call_args.args[0]
    assert message.subject == PasswordEmailService.CHANGED_SUBJECT
    assert settings.SUPPORT_EMAIL in message.body


@pytest.mark.asyncio
async def test_reset_confirmation_subject(smtp_service, fastmail, admin_account):
    await smtp_service.send_password_reset_confirmation_email(admin_account)

    message = fastmail.send_message.call_args.args[0]
    assert message.subject == PasswordEmailService.RESET_CONFIRMATION_SUBJECT


@pytest.mark.asyncio
async def test_delivery_failure_raises(smtp_service, fastmail, admin_account):
    fastmail.send_message.side_effect = ConnectionRefusedError("smtp down")

    with pytest.raises(EmailServiceError):
        await smtp_service.send_password_reset_email(admin_account, TOKEN)


@pytest.mark.parametrize("minutes,text", [(60, "1 hour"), (120, "2 hours"), (30, "30 minutes")])
def test_expiry_description(minutes, text):
    assert PasswordEmailService._describe_minutes(minutes) == text
