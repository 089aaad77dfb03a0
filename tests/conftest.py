"""
Pytest configuration and core fixtures.

Every test gets its own SQLite database file with all tables created from the
model metadata. Each HTTP request gets a fresh session from the test session
factory, the same way ``get_async_session`` works in production, so router
code that calls ``session.begin()`` runs unmodified.
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def pytest_configure(config):
    """Configure pytest with custom settings."""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["ENABLE_SCHEDULER"] = "false"


@pytest.fixture
async def engine(tmp_path: Path):
    from codeshare.core.db import Base
    import codeshare.core.db.models  # noqa: F401

    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield test_engine
    finally:
        await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        autobegin=True,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for setting up data and calling services directly.

    Fixtures commit what they create so that request sessions can see it.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def app():
    """Create FastAPI application for testing."""
    from codeshare.main import app as fastapi_app

    return fastapi_app


@pytest.fixture
async def client(app, session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client bound to the test database."""
    from codeshare.core.dependencies import get_async_session

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_session

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_async_session, None)


@pytest.fixture(autouse=True)
def mock_email_service():
    """Auto-mock OTP email delivery.

    Tests read the plaintext code from the mock's call arguments:
    ``mock_email_service.call_args.args[1]``.
    """
    from codeshare.core.services import EmailManagerService

    with patch.object(
        EmailManagerService,
        "send_otp_email",
        new_callable=AsyncMock,
        return_value=True,
    ) as mock_send:
        yield mock_send


@pytest.fixture(autouse=True)
def init_services():
    from codeshare.core.services import (
        AuthService,
        OTPService,
        SessionService,
        ShareService,
    )

    AuthService.init()
    OTPService.init()
    SessionService.init()
    ShareService.init()
    yield


# ============================================================================
# Data fixtures
# ============================================================================

TEST_PASSWORD = "SecurePass123"


@pytest.fixture(scope="session")
def password_hash() -> str:
    from codeshare.core.utils import hash_password

    return hash_password(TEST_PASSWORD)


@pytest.fixture
async def verified_account(session_factory, password_hash: str):
    from codeshare.core.db.models import Account

    account = Account(
        id=uuid4(),
        email="verified@example.com",
        password_hash=password_hash,
        verified=True,
    )
    async with session_factory() as session:
        session.add(account)
        await session.commit()
    return account


@pytest.fixture
async def unverified_account(session_factory, password_hash: str):
    from codeshare.core.db.models import Account

    account = Account(
        id=uuid4(),
        email="unverified@example.com",
        password_hash=password_hash,
        verified=False,
    )
    async with session_factory() as session:
        session.add(account)
        await session.commit()
    return account


@pytest.fixture
async def other_account(session_factory, password_hash: str):
    from codeshare.core.db.models import Account

    account = Account(
        id=uuid4(),
        email="other@example.com",
        password_hash=password_hash,
        verified=True,
    )
    async with session_factory() as session:
        session.add(account)
        await session.commit()
    return account


@pytest.fixture
async def snippet(session_factory, verified_account):
    from codeshare.core.db.models import Snippet
    from codeshare.core.enums import Language

    snippet = Snippet(
        id=uuid4(),
        account_id=verified_account.id,
        language=Language.PYTHON,
        code="print('hello')",
    )
    async with session_factory() as session:
        session.add(snippet)
        await session.commit()
    return snippet


@pytest.fixture
async def session_token(session_factory, verified_account) -> str:
    """Raw session token for ``verified_account``."""
    from codeshare.core.db.models import Session
    from codeshare.core.utils import generate_token, hash_token, utc_now

    token = generate_token(32)
    async with session_factory() as session:
        session.add(
            Session(
                id=uuid4(),
                token_hash=hash_token(token),
                account_id=verified_account.id,
                email=verified_account.email,
                expires_at=utc_now() + timedelta(hours=24),
            )
        )
        await session.commit()
    return token


@pytest.fixture
async def authenticated_client(client: AsyncClient, session_token: str) -> AsyncClient:
    """Provide a client that carries the session cookie of ``verified_account``."""
    from codeshare.core.config import settings

    client.cookies.set(settings.SESSION_COOKIE_NAME, session_token)
    return client
