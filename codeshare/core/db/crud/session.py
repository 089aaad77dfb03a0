"""
CRUD operations for Session model.

- Looking up sessions by token hash
- Revoking a session (logout)
- Cleaning up expired and revoked sessions
"""

from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from codeshare.core.db.crud.base import BaseDB
from codeshare.core.db.models.session import Session


class SessionDB(BaseDB[Session]):
    """
    Database operations for Session model.

    Example:
        >>> db = SessionDB()
        >>> found = await db.get_by_token_hash(session, "sha256hash...")
    """

    def __init__(self):
        super().__init__(model=Session)
        self.account_loader = selectinload(Session.account)

    async def get_by_token_hash(
        self,
        session: AsyncSession,
        token_hash: str,
    ) -> Session | None:
        """
        Find an unrevoked session by its hash, with its account loaded.

        Expiry is not filtered here; the caller compares ``expires_at``.
        """
        return await self.get_one_by_conditions(
            session=session,
            conditions=[
                self.model.token_hash == token_hash,
                self.model.is_deleted == False,  # noqa: E712
                self.model.revoked_at == None,  # noqa: E711
            ],
            options=[self.account_loader],
        )

    async def revoke(
        self,
        session: AsyncSession,
        token_hash: str,
        commit_self: bool = True,
    ) -> bool:
        """
        Revoke a session by its hash.

        Returns:
            True if a session was revoked, False if it was unknown or already revoked.
        """
        now = datetime.now(timezone.utc)
        updated = await self.update_by_conditions(
            session=session,
            conditions=[
                self.model.token_hash == token_hash,
                self.model.revoked_at == None,  # noqa: E711
            ],
            updates={"revoked_at": now, "updated_at": now},
            commit_self=commit_self,
        )
        return updated > 0

    async def delete_dead_sessions(
        self,
        session: AsyncSession,
        cutoff_date: datetime,
        commit_self: bool = True,
    ) -> int:
        """Hard-delete sessions that expired or were revoked before the cutoff."""
        return await self.delete_by_conditions(
            session=session,
            conditions=[
                or_(
                    self.model.expires_at < cutoff_date,
                    self.model.revoked_at < cutoff_date,
                )
            ],
            commit_self=commit_self,
        )


__all__ = ["SessionDB"]
