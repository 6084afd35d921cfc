import os

# Settings are read at import time, so the environment must be set first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")
os.environ["EMAIL_TEST_MODE"] = "true"

import pytest

from radio_auth.domain.entities import Role
from radio_auth.utils.security import hash_password
from tests.factories.account import create_fake_account
from tests.utils.clock import FrozenClock
from tests.utils.fakes import (
    InMemoryAccountRepository,
    InMemoryRateLimitRepository,
    InMemoryResetTokenRepository,
    RecordingEmailService,
)

OLD_PASSWORD = "OldPass123!"


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def admin_account():
    return create_fake_account(
        id=1,
        email="editor@resistanceradio.org",
        password_hash=hash_password(OLD_PASSWORD),
        role=Role.CONTENT_MANAGER,
    )


@pytest.fixture
def account_repository(admin_account):
    return InMemoryAccountRepository([admin_account])


@pytest.fixture
def token_repository(account_repository):
    return InMemoryResetTokenRepository(account_repository)


@pytest.fixture
def rate_limit_repository():
    return InMemoryRateLimitRepository()


@pytest.fixture
def email_service():
    return RecordingEmailService()
