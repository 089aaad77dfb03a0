"""
CRUD operations for the Account model.

- Creating accounts with duplicate protection on the normalised email
- Looking accounts up by email
- Marking an account verified exactly once
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.db.crud.base import BaseDB
from codeshare.core.db.models.account import Account
from codeshare.core.exceptions.types import (
    DatabaseException,
    UserAlreadyExistsException,
    UserNotFoundException,
)
from codeshare.core.utils import normalize_email


class AccountDB(BaseDB[Account]):
    """
    Database operations for the Account model.

    Every method normalises the email it receives, so callers can pass
    user input straight through.
    """

    def __init__(self):
        super().__init__(model=Account)

    async def get_by_email(self, session: AsyncSession, email: str) -> Account | None:
        return await self.get_one_by_conditions(
            session=session,
            conditions=[
                self.model.email == normalize_email(email),
                self.model.is_deleted == False,  # noqa: E712
            ],
        )

    async def create_account(
        self,
        session: AsyncSession,
        email: str,
        password_hash: str,
        commit_self: bool = True,
    ) -> Account:
        """
        Create an unverified account.

        An existing account under the same normalised email blocks creation
        whether or not it is verified. The unique index on ``email`` covers
        two signups racing past the existence check.

        Args:
            session: The database session.
            email: Email as typed by the user.
            password_hash: bcrypt hash of the password.
            commit_self: Whether to commit the transaction.

        Returns:
            The new Account.

        Raises:
            UserAlreadyExistsException: If the email is already registered.
            DatabaseException: For any other database error.
        """
        email = normalize_email(email)
        if await self.exists(session, {"email": email}):
            raise UserAlreadyExistsException()

        try:
            return await self.create(
                session=session,
                data={
                    "email": email,
                    "password_hash": password_hash,
                    "verified": False,
                },
                commit_self=commit_self,
            )
        except DatabaseException as e:
            if isinstance(e.__cause__, IntegrityError):
                raise UserAlreadyExistsException() from e
            raise

    async def mark_verified(
        self,
        session: AsyncSession,
        email: str,
        commit_self: bool = True,
    ) -> bool:
        """
        Flip ``verified`` to True.

        Returns:
            True if this call performed the transition, False if the account
            was already verified.

        Raises:
            UserNotFoundException: If no account exists for the email.
        """
        email = normalize_email(email)
        updated = await self.update_by_conditions(
            session=session,
            conditions=[
                self.model.email == email,
                self.model.verified == False,  # noqa: E712
            ],
            updates={"verified": True},
            commit_self=commit_self,
        )
        if updated:
            return True

        if not await self.exists(session, {"email": email}):
            raise UserNotFoundException()
        return False


__all__ = ["AccountDB"]
