import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from radio_auth.domain.entities import Role
from radio_auth.infrastructure.database import create_async_db_and_tables
from radio_auth.utils.security import hash_password
from tests.conftest import OLD_PASSWORD
from tests.factories.account import create_fake_account


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_async_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def stored_accounts(db_session):
    accounts = [
        create_fake_account(
            id=1,
            email="Editor@ResistanceRadio.org",
            password_hash=hash_password(OLD_PASSWORD),
            role=Role.CONTENT_MANAGER,
        ),
        create_fake_account(id=2, email="listener@example.com", role=Role.USER),
    ]
    db_session.add_all(accounts)
    await db_session.commit()
    return accounts
