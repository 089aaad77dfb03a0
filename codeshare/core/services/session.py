"""
Session Service for cookie-based authentication.

Sessions are opaque random tokens. Only their SHA256 digest is stored,
next to the account and a fixed absolute expiry.

Example usage:
    issued = await SessionService.login(
        session=db_session, email="user@example.com", password="Secret123"
    )
    response.set_cookie(settings.SESSION_COOKIE_NAME, issued.token, ...)

    account = await SessionService.validate(session=db_session, token=cookie)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import auth_logger, settings
from codeshare.core.db.crud import session_db
from codeshare.core.db.models import Account
from codeshare.core.exceptions.types import (
    AccountNotVerifiedException,
    InvalidCredentialsException,
    InvalidSessionException,
)
from codeshare.core.services.auth import AuthService
from codeshare.core.services.base import SingletonService
from codeshare.core.utils import (
    ensure_utc,
    generate_token,
    hash_token,
    normalize_email,
    utc_now,
)


__all__ = ["SessionService", "IssuedSession"]


@dataclass
class IssuedSession:
    """
    A freshly created session.

    Attributes:
        token: The raw cookie value. It is never stored server-side.
        account: The authenticated account.
        expires_at: Absolute expiry of the session.
    """

    token: str
    account: Account
    expires_at: datetime

    @property
    def max_age(self) -> int:
        """Cookie Max-Age in seconds."""
        return settings.SESSION_EXPIRY_HOURS * 3600


class SessionService(SingletonService):
    @classmethod
    def init(cls) -> None:
        cls._initialized = True
        auth_logger.info("SessionService initialized")

    @classmethod
    async def create_session(
        cls,
        session: AsyncSession,
        account: Account,
        device_info: str | None = None,
        commit_self: bool = True,
    ) -> IssuedSession:
        """
        Create a session for an already-authenticated account.

        Used after a successful OTP confirmation and by :meth:`login`.

        Raises:
            AccountNotVerifiedException: If the account is not verified.
        """
        if not account.verified:
            auth_logger.warning(
                f"Session refused: account not verified {account.email}"
            )
            raise AccountNotVerifiedException()

        token = generate_token(settings.SESSION_TOKEN_BYTES)
        expires_at = utc_now() + timedelta(hours=settings.SESSION_EXPIRY_HOURS)

        await session_db.create(
            session=session,
            data={
                "token_hash": hash_token(token),
                "account_id": account.id,
                "email": account.email,
                "expires_at": expires_at,
                "device_info": device_info,
            },
            commit_self=commit_self,
        )

        auth_logger.info(f"Session created: email={account.email}")
        return IssuedSession(token=token, account=account, expires_at=expires_at)

    @classmethod
    async def login(
        cls,
        session: AsyncSession,
        email: str,
        password: str,
        device_info: str | None = None,
        commit_self: bool = True,
    ) -> IssuedSession:
        """
        Authenticate with email and password and open a session.

        The two failures stay distinct here for logging; the router reports
        both with the same generic message.

        Raises:
            InvalidCredentialsException: Unknown email or wrong password.
            AccountNotVerifiedException: Correct password, unverified account.
        """
        account = await AuthService.verify_credentials(session, email, password)
        if account is None:
            auth_logger.warning(
                f"Login failed: invalid credentials for {normalize_email(email)}"
            )
            raise InvalidCredentialsException()

        return await cls.create_session(
            session=session,
            account=account,
            device_info=device_info,
            commit_self=commit_self,
        )

    @classmethod
    async def validate(cls, session: AsyncSession, token: str | None) -> Account:
        """
        Resolve a session token to its account.

        Fails closed: a missing token, an unknown or revoked session, an
        expired session and a vanished or unverified account all raise the
        same exception. A session is valid while ``now < expires_at``.

        Raises:
            InvalidSessionException: If the token does not name a live session.
        """
        if not token:
            raise InvalidSessionException()

        record = await session_db.get_by_token_hash(session, hash_token(token))
        if record is None:
            auth_logger.warning("Session validation failed: unknown or revoked token")
            raise InvalidSessionException()

        if utc_now() >= ensure_utc(record.expires_at):
            auth_logger.warning(f"Session validation failed: expired for {record.email}")
            raise InvalidSessionException()

        account = record.account
        if account is None or account.is_deleted or not account.verified:
            auth_logger.warning(
                f"Session validation failed: account unavailable for {record.email}"
            )
            raise InvalidSessionException()

        return account

    @classmethod
    async def logout(
        cls,
        session: AsyncSession,
        token: str | None,
        commit_self: bool = True,
    ) -> bool:
        """
        Revoke a session. Idempotent.

        Returns:
            True if a live session was revoked, False if there was nothing to revoke.
        """
        if not token:
            return False

        revoked = await session_db.revoke(
            session=session, token_hash=hash_token(token), commit_self=commit_self
        )
        if revoked:
            auth_logger.info("Session revoked")
        return revoked
