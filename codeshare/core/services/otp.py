"""
OTP Service for issuing and confirming email verification codes.

Only the newest code issued for an email can be confirmed. Issuing a code
supersedes every earlier unused code, and a code can be consumed exactly once
even when two confirmations race.

Example usage:
    code = await OTPService.issue(session=db_session, email="user@example.com")
    confirmation = await OTPService.confirm(
        session=db_session, email="user@example.com", code=code
    )
"""

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import auth_logger, settings
from codeshare.core.db.crud import otp_code_db
from codeshare.core.db.models import Account, OTPCode
from codeshare.core.exceptions.types import (
    AppException,
    OTPAlreadyConsumedException,
    OTPExpiredException,
    OTPInvalidException,
    TooManyAttemptsException,
)
from codeshare.core.services.auth import AuthService
from codeshare.core.services.base import SingletonService
from codeshare.core.utils import (
    ensure_utc,
    generate_otp_code,
    hmac_hash_otp,
    hmac_verify_otp,
    mask_otp,
    normalize_email,
    utc_now,
)


__all__ = ["OTPService", "OTPConfirmation"]


@dataclass
class OTPConfirmation:
    """
    Outcome of a successful OTP confirmation.

    Attributes:
        account: The account the code belonged to, now verified.
        newly_verified: True if this confirmation verified the account,
            False if the account was already verified (re-verification).
    """

    account: Account
    newly_verified: bool

    @property
    def email(self) -> str:
        return self.account.email


class OTPService(SingletonService):
    """
    One-time passcode issuer.

    Codes are random digits from ``secrets``, stored only as HMAC-SHA256
    digests keyed by ``settings.OTP_HMAC_SECRET``.
    """

    @classmethod
    def init(cls) -> None:
        cls._initialized = True
        auth_logger.info("OTPService initialized")

    @classmethod
    async def issue(
        cls,
        session: AsyncSession,
        email: str,
        commit_self: bool = True,
    ) -> str:
        """
        Issue a new code for an existing account.

        Every earlier unused code for the email is superseded and the new
        code gets a full ``OTP_EXPIRY_MINUTES`` window.

        Args:
            session: The database session.
            email: The account email.
            commit_self: If True, commits the transaction.

        Returns:
            str: The plaintext code, for out-of-band delivery only.

        Raises:
            UserNotFoundException: If no account exists for the email.
        """
        account = await AuthService.lookup(session, email)

        superseded = await otp_code_db.invalidate_previous_codes(
            session=session,
            email=account.email,
            commit_self=False,
        )

        otp_code = generate_otp_code(settings.OTP_LENGTH)
        await otp_code_db.create(
            session=session,
            data={
                "account_id": account.id,
                "email": account.email,
                "code_hash": hmac_hash_otp(otp_code, settings.OTP_HMAC_SECRET),
                "expires_at": utc_now()
                + timedelta(minutes=settings.OTP_EXPIRY_MINUTES),
            },
            commit_self=False,
        )

        if commit_self:
            await session.commit()

        auth_logger.info(
            f"OTP issued: email={account.email}, code={mask_otp(otp_code)}, superseded={superseded}"
        )
        return otp_code

    @classmethod
    async def confirm(
        cls,
        session: AsyncSession,
        email: str,
        code: str,
        commit_self: bool = True,
    ) -> OTPConfirmation:
        """
        Confirm a code and verify its account.

        Checks run in this order:
        1. No authoritative code for the email: invalid.
        2. Right code that was already used: already consumed.
        3. Past ``expires_at``: expired, whatever value was supplied.
        4. Attempt limit reached: too many attempts.
        5. Wrong code: invalid. The attempt is recorded by an update that
           only matches while guesses remain, and is committed at once so it
           survives the error response.
        6. Conditional consume, also bounded by the attempt limit.

        Steps 5 and 6 re-check the row in the database, so requests racing
        on one code are judged by what the update actually changed.

        Args:
            session: The database session.
            email: The email the code was sent to.
            code: The code supplied by the user.
            commit_self: If True, commits the successful confirmation.

        Returns:
            OTPConfirmation: The verified account and whether it was newly verified.
        """
        email = normalize_email(email)
        latest = await otp_code_db.get_latest_code_for_email(session, email)

        if latest is None:
            auth_logger.warning(f"OTP confirm failed: no code issued for {email}")
            raise OTPInvalidException()

        matches = hmac_verify_otp(code, latest.code_hash, settings.OTP_HMAC_SECRET)

        if matches and latest.used_at is not None:
            auth_logger.warning(f"OTP confirm failed: code already used for {email}")
            raise OTPAlreadyConsumedException()

        if utc_now() >= ensure_utc(latest.expires_at):
            auth_logger.warning(f"OTP confirm failed: code expired for {email}")
            raise OTPExpiredException()

        if latest.attempts >= settings.OTP_MAX_ATTEMPTS:
            auth_logger.warning(f"OTP confirm failed: too many attempts for {email}")
            raise TooManyAttemptsException()

        if not matches:
            recorded = await otp_code_db.increment_attempts(
                session=session,
                code_id=latest.id,
                max_attempts=settings.OTP_MAX_ATTEMPTS,
                commit_self=True,
            )
            if not recorded:
                raise await cls._rejection_after_lost_update(
                    session, latest, email, matches
                )
            auth_logger.warning(
                f"OTP confirm failed: wrong code {mask_otp(code)} for {email}"
            )
            raise OTPInvalidException()

        if not await otp_code_db.consume(
            session=session,
            code_id=latest.id,
            max_attempts=settings.OTP_MAX_ATTEMPTS,
            commit_self=False,
        ):
            raise await cls._rejection_after_lost_update(
                session, latest, email, matches
            )

        newly_verified = await AuthService.mark_verified(
            session=session, email=email, commit_self=False
        )
        account = await AuthService.lookup(session, email)
        await session.refresh(account)

        if commit_self:
            await session.commit()

        auth_logger.info(
            f"OTP confirmed: email={email}, newly_verified={newly_verified}"
        )
        return OTPConfirmation(account=account, newly_verified=newly_verified)

    @classmethod
    async def _rejection_after_lost_update(
        cls, session: AsyncSession, code: OTPCode, email: str, matches: bool
    ) -> AppException:
        """
        Pick the error for a guess whose conditional update matched no row.

        Another request changed the code between the read and the update, so
        the row is re-read to report its current state.
        """
        await session.refresh(code)
        if matches and code.used_at is not None:
            auth_logger.warning(f"OTP confirm lost consume race for {email}")
            return OTPAlreadyConsumedException()
        if code.attempts >= settings.OTP_MAX_ATTEMPTS:
            auth_logger.warning(f"OTP confirm failed: too many attempts for {email}")
            return TooManyAttemptsException()
        auth_logger.warning(f"OTP confirm failed: code no longer open for {email}")
        return OTPInvalidException()
