"""
Credential store behind signup and login.

- Account creation with bcrypt password hashing
- Account lookup by normalised email
- Password verification that does not reveal whether the email exists

Example usage:
    from codeshare.core.services.auth import AuthService

    AuthService.init()

    account = await AuthService.signup(
        session=db_session,
        email="user@example.com",
        password="SecurePassword123",
    )
"""

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import auth_logger
from codeshare.core.db.crud import account_db
from codeshare.core.db.models import Account
from codeshare.core.exceptions.types import UserNotFoundException
from codeshare.core.services.base import SingletonService
from codeshare.core.utils import hash_password, normalize_email, verify_password


__all__ = ["AuthService"]


class AuthService(SingletonService):
    # Checked for unknown emails so a miss costs as much as a wrong password
    _dummy_hash: str | None = None

    @classmethod
    def init(cls) -> None:
        """Precompute the dummy bcrypt hash."""
        cls._get_dummy_hash()
        cls._initialized = True
        auth_logger.info("AuthService initialized")

    @classmethod
    def _get_dummy_hash(cls) -> str:
        if cls._dummy_hash is None:
            cls._dummy_hash = hash_password("codeshare-dummy-password")
        return cls._dummy_hash

    @classmethod
    async def signup(
        cls,
        session: AsyncSession,
        email: str,
        password: str,
        commit_self: bool = True,
    ) -> Account:
        """
        Register a new, unverified account.

        Raises:
            UserAlreadyExistsException: If the email already has an account,
                verified or not.
        """
        account = await account_db.create_account(
            session=session,
            email=email,
            password_hash=hash_password(password),
            commit_self=commit_self,
        )
        auth_logger.info(f"Account signup: email={account.email}")
        return account

    @classmethod
    async def lookup(cls, session: AsyncSession, email: str) -> Account:
        """
        Fetch an account by email.

        Raises:
            UserNotFoundException: If no account exists for the email.
        """
        account = await account_db.get_by_email(session, email)
        if account is None:
            raise UserNotFoundException()
        return account

    @classmethod
    async def mark_verified(
        cls, session: AsyncSession, email: str, commit_self: bool = True
    ) -> bool:
        """
        Mark an account verified.

        Returns:
            True on the first verification, False if it was already verified.

        Raises:
            UserNotFoundException: If no account exists for the email.
        """
        transitioned = await account_db.mark_verified(
            session=session, email=email, commit_self=commit_self
        )
        if transitioned:
            auth_logger.info(f"Account verified: email={normalize_email(email)}")
        return transitioned

    @classmethod
    async def verify_credentials(
        cls,
        session: AsyncSession,
        email: str,
        password: str,
    ) -> Account | None:
        """
        Check an email/password pair.

        bcrypt runs even when the account does not exist, so response time
        does not tell an attacker which emails are registered.

        Returns:
            The Account if the password matches, None otherwise.
        """
        account = await account_db.get_by_email(session, email)
        if account is None:
            verify_password(password, cls._get_dummy_hash())
            return None

        if not verify_password(password, account.password_hash):
            return None
        return account
