"""
CRUD operations for OTPCode model.

This module provides database operations for OTP management including
superseding earlier codes, attempt counting, atomic consumption and
cleanup of dead codes.
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.db.crud.base import BaseDB
from codeshare.core.db.models.otp import OTPCode
from codeshare.core.exceptions.types import DatabaseException
from codeshare.core.utils import normalize_email


class OTPCodeDB(BaseDB[OTPCode]):
    """
    CRUD operations for OTPCode model.

    Only the newest code for an email that has not been soft-deleted is
    authoritative; :meth:`invalidate_previous_codes` keeps that true.
    """

    def __init__(self):
        super().__init__(model=OTPCode)

    async def get_latest_code_for_email(
        self,
        session: AsyncSession,
        email: str,
    ) -> OTPCode | None:
        """
        Retrieve the authoritative OTP code for an email.

        Returns the most recently created code that has not been superseded,
        whether or not it is expired or consumed. The row is always re-read
        so that attempt counts and ``used_at`` reflect the database even if
        the code is already in the session.

        Args:
            session: The async database session.
            email: The email address.

        Returns:
            The most recent OTPCode if found, None otherwise.
        """
        try:
            stmt = (
                select(self.model)
                .where(
                    self.model.email == normalize_email(email),
                    self.model.is_deleted == False,  # noqa: E712
                )
                .order_by(self.model.created_at.desc())
                .limit(1)
                .execution_options(populate_existing=True)
            )
            result = await session.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Error retrieving latest OTP code for {email}: {str(e)}"
            ) from e

    async def invalidate_previous_codes(
        self,
        session: AsyncSession,
        email: str,
        commit_self: bool = True,
    ) -> int:
        """
        Soft-delete all unused OTP codes for an email.

        Called before a new code is stored so that only the newest code
        can be confirmed.

        Returns:
            The number of codes superseded.
        """
        return await self.soft_delete_by_conditions(
            session=session,
            conditions=[
                self.model.email == normalize_email(email),
                self.model.used_at.is_(None),
                self.model.is_deleted.is_(False),
            ],
            commit_self=commit_self,
        )

    async def increment_attempts(
        self,
        session: AsyncSession,
        code_id: UUID,
        max_attempts: int,
        commit_self: bool = True,
    ) -> bool:
        """
        Record one failed guess, unless the code has no guesses left.

        The limit is part of the ``UPDATE`` itself, so concurrent wrong
        guesses cannot all slip under it: at most ``max_attempts`` of them
        ever see a row updated.

        Returns:
            True if the attempt was recorded, False if the code is spent,
            consumed or superseded.
        """
        updated = await self.update_by_conditions(
            session=session,
            conditions=[
                self.model.id == code_id,
                self.model.attempts < max_attempts,
                self.model.used_at.is_(None),
                self.model.is_deleted.is_(False),
            ],
            updates={"attempts": self.model.attempts + 1},
            commit_self=commit_self,
        )
        return updated == 1

    async def consume(
        self,
        session: AsyncSession,
        code_id: UUID,
        max_attempts: int | None = None,
        commit_self: bool = True,
    ) -> bool:
        """
        Mark a code as used if, and only if, nobody has used it yet.

        This is a single conditional ``UPDATE``. When two requests race on the
        same code exactly one of them sees a row updated. With
        ``max_attempts`` a code whose guesses ran out cannot be consumed either.

        Returns:
            True if this call consumed the code, False if it was already
            consumed, superseded or out of attempts.
        """
        now = datetime.now(timezone.utc)
        conditions = [
            self.model.id == code_id,
            self.model.used_at.is_(None),
            self.model.is_deleted.is_(False),
        ]
        if max_attempts is not None:
            conditions.append(self.model.attempts < max_attempts)
        updated = await self.update_by_conditions(
            session=session,
            conditions=conditions,
            updates={"used_at": now, "updated_at": now},
            commit_self=commit_self,
        )
        return updated == 1

    async def delete_dead_codes(
        self,
        session: AsyncSession,
        cutoff_date: datetime,
        commit_self: bool = True,
    ) -> int:
        """
        Hard-delete codes that expired, were consumed or were superseded before the cutoff.
        """
        return await self.delete_by_conditions(
            session=session,
            conditions=[
                or_(
                    self.model.expires_at < cutoff_date,
                    self.model.used_at < cutoff_date,
                    self.model.deleted_at < cutoff_date,
                )
            ],
            commit_self=commit_self,
        )


__all__ = ["OTPCodeDB"]
