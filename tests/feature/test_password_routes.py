from unittest.mock import AsyncMock

import pytest

from radio_auth.adapters.api.v1.health import get_database_status
from radio_auth.domain.entities import Role
from radio_auth.domain.services.password.password_service import RESET_REQUESTED_MESSAGE
from radio_auth.infrastructure.dependency_injection.auth_dependencies import (
    get_email_service,
    get_password_service,
)
from radio_auth.utils.security import create_session_token, verify_password
from tests.conftest import OLD_PASSWORD
from tests.factories.account import create_fake_account
from tests.utils.fakes import RecordingEmailService

CHANGE_URL = "/api/admin/password/change"
REQUEST_URL = "/api/admin/password/reset/request"
COMPLETE_URL = "/api/admin/password/reset/complete"
NEW_PASSWORD = "NewValid123!"


def _auth_headers(account):
    return {"Authorization": f"Bearer {create_session_token(account.id, account.role)}"}


class TestChangePasswordEndpoint:
    @pytest.mark.asyncio
    async def test_change_password(self, client, admin_account, email_service):
        response = await client.post(
            CHANGE_URL,
            json={"currentPassword": OLD_PASSWORD, "newPassword": NEW_PASSWORD},
            headers=_auth_headers(admin_account),
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Password changed successfully"}
        assert verify_password(NEW_PASSWORD, admin_account.password_hash)
        assert email_service.changed_emails == [admin_account.email]

    @pytest.mark.asyncio
    async def test_missing_session(self, client):
        response = await client.post(
            CHANGE_URL, json={"currentPassword": OLD_PASSWORD, "newPassword": NEW_PASSWORD}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_REQUIRED"

    @pytest.mark.asyncio
    async def test_session_for_deleted_account(self, client, account_repository, admin_account):
        headers = _auth_headers(admin_account)
        account_repository.accounts.clear()

        response = await client.post(
            CHANGE_URL,
            json={"currentPassword": OLD_PASSWORD, "newPassword": NEW_PASSWORD},
            headers=headers,
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, client, admin_account):
        response = await client.post(
            CHANGE_URL,
            json={"currentPassword": "WrongPass123!", "newPassword": NEW_PASSWORD},
            headers=_auth_headers(admin_account),
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CURRENT_PASSWORD"

    @pytest.mark.asyncio
    async def test_policy_violation_lists_rules(self, client, admin_account):
        response = await client.post(
            CHANGE_URL,
            json={"currentPassword": OLD_PASSWORD, "newPassword": "short"},
            headers=_auth_headers(admin_account),
        )

        body = response.json()["error"]
        assert response.status_code == 400
        assert body["code"] == "VALIDATION_ERROR"
        assert "Password must be at least 8 characters long" in body["details"]

    @pytest.mark.asyncio
    async def test_missing_field(self, client, admin_account):
        response = await client.post(
            CHANGE_URL,
            json={"currentPassword": OLD_PASSWORD},
            headers=_auth_headers(admin_account),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    @pytest.mark.asyncio
    async def test_confirmation_email_failure_is_ignored(self, app, client, admin_account):
        app.dependency_overrides[get_email_service] = lambda: RecordingEmailService(fail=True)

        response = await client.post(
            CHANGE_URL,
            json={"currentPassword": OLD_PASSWORD, "newPassword": NEW_PASSWORD},
            headers=_auth_headers(admin_account),
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unexpected_error_is_opaque(self, app, client, admin_account):
        service = AsyncMock()
        service.change_password.side_effect = RuntimeError("connection reset")
        app.dependency_overrides[get_password_service] = lambda: service

        response = await client.post(
            CHANGE_URL,
            json={"currentPassword": OLD_PASSWORD, "newPassword": NEW_PASSWORD},
            headers=_auth_headers(admin_account),
        )

        assert response.status_code == 500
        assert response.json() == {
            "error": {"message": "An unexpected error occurred", "code": "SERVER_ERROR"}
        }


class TestResetRequestEndpoint:
    @pytest.mark.asyncio
    async def test_known_and_unknown_emails_look_the_same(self, client, email_service):
        known = await client.post(REQUEST_URL, json={"email": "editor@resistanceradio.org"})
        unknown = await client.post(REQUEST_URL, json={"email": "nobody@resistanceradio.org"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json() == {"message": RESET_REQUESTED_MESSAGE}
        assert len(email_service.reset_emails) == 1

    @pytest.mark.asyncio
    async def test_listener_account_gets_no_email(self, client, account_repository, email_service):
        listener = create_fake_account(id=5, email="listener@example.com", role=Role.USER)
        account_repository.accounts[listener.id] = listener

        response = await client.post(REQUEST_URL, json={"email": listener.email})

        assert response.status_code == 200
        assert email_service.reset_emails == []

    @pytest.mark.asyncio
    async def test_fourth_request_is_throttled(self, client):
        for _ in range(3):
            response = await client.post(REQUEST_URL, json={"email": "editor@resistanceradio.org"})
            assert response.status_code == 200

        response = await client.post(REQUEST_URL, json={"email": "Editor@ResistanceRadio.org"})

        body = response.json()["error"]
        assert response.status_code == 429
        assert body["code"] == "RATE_LIMIT_EXCEEDED"
        assert body["retryAfter"] > 0
        assert response.headers["Retry-After"] == str(body["retryAfter"])

    @pytest.mark.asyncio
    async def test_invalid_email(self, client):
        response = await client.post(REQUEST_URL, json={"email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"
        assert response.json()["error"]["details"][0]["field"] == "email"

    @pytest.mark.asyncio
    async def test_email_outage_is_hidden(self, app, client):
        app.dependency_overrides[get_email_service] = lambda: RecordingEmailService(fail=True)

        response = await client.post(REQUEST_URL, json={"email": "editor@resistanceradio.org"})

        assert response.status_code == 200
        assert response.json() == {"message": RESET_REQUESTED_MESSAGE}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_hidden(self, app, client):
        service = AsyncMock()
        service.initiate_password_reset.side_effect = RuntimeError("database unavailable")
        app.dependency_overrides[get_password_service] = lambda: service

        response = await client.post(REQUEST_URL, json={"email": "editor@resistanceradio.org"})

        assert response.status_code == 200
        assert response.json() == {"message": RESET_REQUESTED_MESSAGE}


class TestResetCompleteEndpoint:
    @pytest.mark.asyncio
    async def test_full_reset_flow(self, client, email_service, admin_account):
        await client.post(REQUEST_URL, json={"email": admin_account.email})
        token = email_service.last_reset_token

        response = await client.post(COMPLETE_URL, json={"token": token, "newPassword": NEW_PASSWORD})

        assert response.status_code == 200
        assert response.json() == {"message": "Password reset successfully"}
        assert verify_password(NEW_PASSWORD, admin_account.password_hash)
        assert email_service.reset_confirmations == [admin_account.email]

        reused = await client.post(COMPLETE_URL, json={"token": token, "newPassword": "Another123!"})
        assert reused.status_code == 400
        assert reused.json() == {
            "error": {"message": "Invalid or expired reset token", "code": "INVALID_TOKEN"}
        }

    @pytest.mark.asyncio
    async def test_unknown_token(self, client):
        response = await client.post(COMPLETE_URL, json={"token": "0" * 64, "newPassword": NEW_PASSWORD})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_weak_password(self, client, email_service, admin_account):
        await client.post(REQUEST_URL, json={"email": admin_account.email})

        response = await client.post(
            COMPLETE_URL, json={"token": email_service.last_reset_token, "newPassword": "weak"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert verify_password(OLD_PASSWORD, admin_account.password_hash)

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.post(COMPLETE_URL, json={"newPassword": NEW_PASSWORD})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["services"]["database"] == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_degraded(self, app, client):
        app.dependency_overrides[get_database_status] = lambda: {"status": "unhealthy"}

        response = await client.get("/api/health")

        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/api/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
