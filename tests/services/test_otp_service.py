"""
Test suite for OTPService.

- Issuing codes supersedes earlier ones
- Confirmation outcomes: success, invalid, expired, already consumed
- Attempt limit
- Concurrent confirmations on separate sessions

Run tests:
    pytest tests/services/test_otp_service.py -v
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from freezegun import freeze_time
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import settings
from codeshare.core.db.crud import account_db, otp_code_db
from codeshare.core.db.models import OTPCode
from codeshare.core.exceptions.types import (
    AppException,
    OTPAlreadyConsumedException,
    OTPExpiredException,
    OTPInvalidException,
    TooManyAttemptsException,
    UserNotFoundException,
)
from codeshare.core.services import OTPService
from codeshare.core.utils import hmac_hash_otp


def _wrong(code: str) -> str:
    return "000000" if code != "000000" else "111111"


class TestIssue:

    async def test_issue_stores_only_a_digest(
        self, db_session: AsyncSession, unverified_account
    ):
        code = await OTPService.issue(db_session, unverified_account.email)

        assert len(code) == settings.OTP_LENGTH and code.isdigit()
        stored = await otp_code_db.get_latest_code_for_email(
            db_session, unverified_account.email
        )
        assert stored.code_hash == hmac_hash_otp(code, settings.OTP_HMAC_SECRET)
        assert code not in stored.code_hash

    async def test_issue_sets_expiry_window(
        self, db_session: AsyncSession, unverified_account
    ):
        with freeze_time("2026-03-01 12:00:00"):
            await OTPService.issue(db_session, unverified_account.email)

        stored = await otp_code_db.get_latest_code_for_email(
            db_session, unverified_account.email
        )
        expires_at = stored.expires_at.replace(tzinfo=timezone.utc)
        assert expires_at == datetime(2026, 3, 1, 12, 10, tzinfo=timezone.utc)

    async def test_issue_for_unknown_email_raises(self, db_session: AsyncSession):
        with pytest.raises(UserNotFoundException):
            await OTPService.issue(db_session, "ghost@example.com")

    async def test_reissue_supersedes_previous_code(
        self, db_session: AsyncSession, unverified_account
    ):
        await OTPService.issue(db_session, unverified_account.email)
        await OTPService.issue(db_session, unverified_account.email)

        rows = (
            await db_session.execute(
                select(OTPCode).execution_options(populate_existing=True)
            )
        ).scalars().all()
        assert len(rows) == 2
        assert sorted(row.is_deleted for row in rows) == [False, True]


class TestConfirm:

    async def test_confirm_verifies_account(
        self, db_session: AsyncSession, unverified_account
    ):
        code = await OTPService.issue(db_session, unverified_account.email)

        confirmation = await OTPService.confirm(
            db_session, "Unverified@Example.com", code
        )

        assert confirmation.newly_verified is True
        assert confirmation.email == unverified_account.email
        assert confirmation.account.verified is True

    async def test_confirm_on_verified_account_reports_not_newly_verified(
        self, db_session: AsyncSession, verified_account
    ):
        code = await OTPService.issue(db_session, verified_account.email)

        confirmation = await OTPService.confirm(db_session, verified_account.email, code)

        assert confirmation.newly_verified is False

    async def test_wrong_code_is_invalid_and_counts_an_attempt(
        self, db_session: AsyncSession, unverified_account
    ):
        code = await OTPService.issue(db_session, unverified_account.email)

        with pytest.raises(OTPInvalidException):
            await OTPService.confirm(db_session, unverified_account.email, _wrong(code))

        stored = await otp_code_db.get_latest_code_for_email(
            db_session, unverified_account.email
        )
        await db_session.refresh(stored)
        assert stored.attempts == 1

    async def test_no_code_issued_is_invalid(
        self, db_session: AsyncSession, unverified_account
    ):
        with pytest.raises(OTPInvalidException):
            await OTPService.confirm(db_session, unverified_account.email, "123456")

    async def test_superseded_code_is_invalid(
        self, db_session: AsyncSession, unverified_account
    ):
        first = await OTPService.issue(db_session, unverified_account.email)
        second = first
        while second == first:
            second = await OTPService.issue(db_session, unverified_account.email)

        with pytest.raises(OTPInvalidException):
            await OTPService.confirm(db_session, unverified_account.email, first)

        confirmation = await OTPService.confirm(
            db_session, unverified_account.email, second
        )
        assert confirmation.newly_verified is True

    async def test_code_cannot_be_used_twice(
        self, db_session: AsyncSession, unverified_account
    ):
        code = await OTPService.issue(db_session, unverified_account.email)
        await OTPService.confirm(db_session, unverified_account.email, code)

        with pytest.raises(OTPAlreadyConsumedException):
            await OTPService.confirm(db_session, unverified_account.email, code)

    async def test_expired_code_is_rejected_even_when_correct(
        self, db_session: AsyncSession, unverified_account
    ):
        with freeze_time("2026-03-01 12:00:00"):
            code = await OTPService.issue(db_session, unverified_account.email)

        with freeze_time("2026-03-01 12:10:01"):
            with pytest.raises(OTPExpiredException):
                await OTPService.confirm(db_session, unverified_account.email, code)

        account = await account_db.get_by_email(db_session, unverified_account.email)
        await db_session.refresh(account)
        assert account.verified is False

    async def test_code_is_valid_just_before_expiry(
        self, db_session: AsyncSession, unverified_account
    ):
        with freeze_time("2026-03-01 12:00:00"):
            code = await OTPService.issue(db_session, unverified_account.email)

        with freeze_time("2026-03-01 12:09:59"):
            confirmation = await OTPService.confirm(
                db_session, unverified_account.email, code
            )
        assert confirmation.newly_verified is True

    async def test_attempt_limit_blocks_even_the_right_code(
        self, db_session: AsyncSession, unverified_account
    ):
        code = await OTPService.issue(db_session, unverified_account.email)

        for _ in range(settings.OTP_MAX_ATTEMPTS):
            with pytest.raises(OTPInvalidException):
                await OTPService.confirm(
                    db_session, unverified_account.email, _wrong(code)
                )

        with pytest.raises(TooManyAttemptsException):
            await OTPService.confirm(db_session, unverified_account.email, code)

    async def test_new_code_resets_attempt_count(
        self, db_session: AsyncSession, unverified_account
    ):
        code = await OTPService.issue(db_session, unverified_account.email)
        for _ in range(settings.OTP_MAX_ATTEMPTS):
            with pytest.raises(OTPInvalidException):
                await OTPService.confirm(
                    db_session, unverified_account.email, _wrong(code)
                )

        fresh = await OTPService.issue(db_session, unverified_account.email)
        confirmation = await OTPService.confirm(
            db_session, unverified_account.email, fresh
        )
        assert confirmation.newly_verified is True

    async def test_losing_the_consume_race_reports_already_consumed(
        self, session_factory, unverified_account
    ):
        async with session_factory() as setup:
            code = await OTPService.issue(setup, unverified_account.email)

        real_consume = otp_code_db.consume

        async def consumed_elsewhere_first(**kwargs):
            async with session_factory() as other:
                assert await real_consume(other, kwargs["code_id"])
            return await real_consume(**kwargs)

        async with session_factory() as session:
            with patch(
                "codeshare.core.services.otp.otp_code_db.consume",
                side_effect=consumed_elsewhere_first,
            ):
                with pytest.raises(OTPAlreadyConsumedException):
                    await OTPService.confirm(session, unverified_account.email, code)

    async def test_wrong_guess_that_loses_the_last_attempt_is_too_many(
        self, session_factory, unverified_account
    ):
        async with session_factory() as setup:
            code = await OTPService.issue(setup, unverified_account.email)

        real_increment = otp_code_db.increment_attempts

        async def attempts_spent_elsewhere_first(**kwargs):
            async with session_factory() as other:
                while await real_increment(
                    other, kwargs["code_id"], settings.OTP_MAX_ATTEMPTS
                ):
                    pass
            return await real_increment(**kwargs)

        async with session_factory() as session:
            with patch(
                "codeshare.core.services.otp.otp_code_db.increment_attempts",
                side_effect=attempts_spent_elsewhere_first,
            ):
                with pytest.raises(TooManyAttemptsException):
                    await OTPService.confirm(
                        session, unverified_account.email, _wrong(code)
                    )

    async def test_second_session_cannot_consume_a_consumed_code(
        self, session_factory, unverified_account
    ):
        async with session_factory() as first:
            code = await OTPService.issue(first, unverified_account.email)
            stored = await otp_code_db.get_latest_code_for_email(
                first, unverified_account.email
            )
            await OTPService.confirm(first, unverified_account.email, code)

        async with session_factory() as second:
            assert await otp_code_db.consume(second, stored.id) is False


async def _confirm_in_own_session(session_factory, email: str, code: str) -> str:
    async with session_factory() as session:
        try:
            await OTPService.confirm(session, email, code)
        except AppException as e:
            return type(e).__name__
    return "ok"


class TestConcurrentConfirm:

    async def test_parallel_wrong_guesses_respect_attempt_limit(
        self, session_factory, unverified_account
    ):
        async with session_factory() as setup:
            code = await OTPService.issue(setup, unverified_account.email)

        outcomes = await asyncio.gather(
            *(
                _confirm_in_own_session(
                    session_factory, unverified_account.email, _wrong(code)
                )
                for _ in range(settings.OTP_MAX_ATTEMPTS * 4)
            )
        )

        assert outcomes.count("OTPInvalidException") == settings.OTP_MAX_ATTEMPTS
        assert set(outcomes) == {"OTPInvalidException", "TooManyAttemptsException"}

        async with session_factory() as check:
            stored = await otp_code_db.get_latest_code_for_email(
                check, unverified_account.email
            )
            assert stored.attempts == settings.OTP_MAX_ATTEMPTS
            assert stored.used_at is None

        with pytest.raises(TooManyAttemptsException):
            async with session_factory() as session:
                await OTPService.confirm(session, unverified_account.email, code)

    async def test_parallel_right_guesses_verify_exactly_once(
        self, session_factory, unverified_account
    ):
        async with session_factory() as setup:
            code = await OTPService.issue(setup, unverified_account.email)

        outcomes = await asyncio.gather(
            *(
                _confirm_in_own_session(
                    session_factory, unverified_account.email, code
                )
                for _ in range(5)
            )
        )

        assert outcomes.count("ok") == 1
        assert outcomes.count("OTPAlreadyConsumedException") == 4

        async with session_factory() as check:
            account = await account_db.get_by_email(check, unverified_account.email)
            assert account.verified is True
