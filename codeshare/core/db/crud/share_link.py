"""
CRUD operations for ShareLink model.

"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from codeshare.core.db.crud.base import BaseDB
from codeshare.core.db.models.share_link import ShareLink


class ShareLinkDB(BaseDB[ShareLink]):
    """Database operations for share links."""

    def __init__(self):
        super().__init__(model=ShareLink)
        self.snippet_loader = selectinload(ShareLink.snippet)

    async def token_hash_exists(self, session: AsyncSession, token_hash: str) -> bool:
        return await self.exists(session, {"token_hash": token_hash})

    async def get_by_token_hash(
        self,
        session: AsyncSession,
        token_hash: str,
    ) -> ShareLink | None:
        """
        Find a share link by token hash with its snippet loaded.

        Expired links are returned too; expiry is decided by the caller.
        """
        return await self.get_one_by_conditions(
            session=session,
            conditions=[
                self.model.token_hash == token_hash,
                self.model.is_deleted == False,  # noqa: E712
            ],
            options=[self.snippet_loader],
        )

    async def delete_expired(
        self,
        session: AsyncSession,
        cutoff_date: datetime,
        commit_self: bool = True,
    ) -> int:
        """Hard-delete links that expired before the cutoff."""
        return await self.delete_by_conditions(
            session=session,
            conditions=[self.model.expires_at < cutoff_date],
            commit_self=commit_self,
        )


__all__ = ["ShareLinkDB"]
