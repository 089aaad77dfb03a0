"""
Test suite for SessionService.

Run tests:
    pytest tests/services/test_session_service.py -v
"""

from datetime import timedelta

import pytest
from freezegun import freeze_time
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import settings
from codeshare.core.db.crud import session_db
from codeshare.core.exceptions.types import (
    AccountNotVerifiedException,
    InvalidCredentialsException,
    InvalidSessionException,
)
from codeshare.core.services import SessionService
from codeshare.core.utils import hash_token
from tests.conftest import TEST_PASSWORD


class TestLogin:

    async def test_login_issues_opaque_token(
        self, db_session: AsyncSession, verified_account
    ):
        issued = await SessionService.login(
            db_session, "Verified@Example.com", TEST_PASSWORD, device_info="Linux"
        )

        assert issued.account.id == verified_account.id
        assert verified_account.email not in issued.token
        assert issued.max_age == settings.SESSION_EXPIRY_HOURS * 3600

        record = await session_db.get_by_token_hash(db_session, hash_token(issued.token))
        assert record is not None
        assert record.device_info == "Linux"
        assert record.token_hash != issued.token

    async def test_wrong_password(self, db_session: AsyncSession, verified_account):
        with pytest.raises(InvalidCredentialsException):
            await SessionService.login(db_session, verified_account.email, "Nope1234")

    async def test_unknown_email(self, db_session: AsyncSession):
        with pytest.raises(InvalidCredentialsException):
            await SessionService.login(db_session, "ghost@example.com", TEST_PASSWORD)

    async def test_unverified_account(
        self, db_session: AsyncSession, unverified_account
    ):
        with pytest.raises(AccountNotVerifiedException):
            await SessionService.login(
                db_session, unverified_account.email, TEST_PASSWORD
            )

    async def test_each_login_gets_a_new_token(
        self, db_session: AsyncSession, verified_account
    ):
        first = await SessionService.login(
            db_session, verified_account.email, TEST_PASSWORD
        )
        second = await SessionService.login(
            db_session, verified_account.email, TEST_PASSWORD
        )
        assert first.token != second.token


class TestValidate:

    async def test_valid_token(self, db_session: AsyncSession, session_token, verified_account):
        account = await SessionService.validate(db_session, session_token)
        assert account.id == verified_account.id

    @pytest.mark.parametrize("token", [None, "", "not-a-real-token"])
    async def test_missing_or_unknown_token(self, db_session: AsyncSession, token):
        with pytest.raises(InvalidSessionException):
            await SessionService.validate(db_session, token)

    async def test_expiry_boundary(self, session_factory, verified_account):
        with freeze_time("2026-05-01 08:00:00"):
            async with session_factory() as session:
                issued = await SessionService.create_session(session, verified_account)
        expires_at = issued.expires_at

        with freeze_time(expires_at - timedelta(seconds=1)):
            async with session_factory() as session:
                account = await SessionService.validate(session, issued.token)
                assert account.id == verified_account.id

        with freeze_time(expires_at + timedelta(seconds=1)):
            async with session_factory() as session:
                with pytest.raises(InvalidSessionException):
                    await SessionService.validate(session, issued.token)

    async def test_revoked_token(self, db_session: AsyncSession, session_token):
        assert await SessionService.logout(db_session, session_token) is True

        with pytest.raises(InvalidSessionException):
            await SessionService.validate(db_session, session_token)


class TestCreateSession:

    async def test_refuses_unverified_account(
        self, db_session: AsyncSession, unverified_account
    ):
        with pytest.raises(AccountNotVerifiedException):
            await SessionService.create_session(db_session, unverified_account)


class TestLogout:

    async def test_logout_is_idempotent(self, db_session: AsyncSession, session_token):
        assert await SessionService.logout(db_session, session_token) is True
        assert await SessionService.logout(db_session, session_token) is False

    async def test_logout_without_token(self, db_session: AsyncSession):
        assert await SessionService.logout(db_session, None) is False
