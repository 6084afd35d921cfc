import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from radio_auth.adapters.api.v1.health import get_database_status
from radio_auth.core.application import create_application
from radio_auth.infrastructure.dependency_injection.auth_dependencies import (
    get_account_repository,
    get_email_service,
    get_rate_limit_repository,
    get_reset_token_repository,
)


@pytest.fixture
def app(account_repository, token_repository, rate_limit_repository, email_service):
    application = create_application(with_lifespan=False)
    application.dependency_overrides[get_account_repository] = lambda: account_repository
    application.dependency_overrides[get_reset_token_repository] = lambda: token_repository
    application.dependency_overrides[get_rate_limit_repository] = lambda: rate_limit_repository
    application.dependency_overrides[get_email_service] = lambda: email_service
    application.dependency_overrides[get_database_status] = lambda: {"status": "healthy"}
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client
