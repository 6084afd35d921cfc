import pytest
import structlog
from structlog.testing import capture_logs

from radio_auth.core.exceptions import InvalidTokenError
from radio_auth.core.logging.audit import audited_operation

logger = structlog.get_logger("radio_auth.tests.audit")


@pytest.mark.asyncio
async def test_success_entry_carries_bound_fields():
    with capture_logs() as logs:
        async with audited_operation(logger, "password_change", account_id=1) as audit:
            audit.bind(email="editor@resistanceradio.org")
            audit.succeed("Password changed")

    [entry] = logs
    assert entry["event"] == "Password changed"
    assert entry["log_level"] == "info"
    assert entry["operation"] == "password_change"
    assert entry["outcome"] == "success"
    assert entry["account_id"] == 1
    assert entry["email"] == "editor@resistanceradio.org"
    assert entry["duration_ms"] >= 0
    assert "timestamp" in entry


@pytest.mark.asyncio
async def test_expected_failure_is_a_warning_and_reraised():
    with capture_logs() as logs:
        with pytest.raises(InvalidTokenError):
            async with audited_operation(logger, "password_reset_complete", "Reset failed"):
                raise InvalidTokenError()

    [entry] = logs
    assert entry["event"] == "Reset failed"
    assert entry["log_level"] == "warning"
    assert entry["outcome"] == "failure"
    assert entry["error"] == "Invalid or expired reset token"
    assert entry["error_type"] == "InvalidTokenError"
    assert "exc_info" not in entry


@pytest.mark.asyncio
async def test_unexpected_failure_is_an_error_with_traceback():
    with capture_logs() as logs:
        with pytest.raises(RuntimeError):
            async with audited_operation(logger, "password_reset_request"):
                raise RuntimeError("boom")

    [entry] = logs
    assert entry["event"] == "password_reset_request failed"
    assert entry["log_level"] == "error"
    assert isinstance(entry["exc_info"], RuntimeError)
