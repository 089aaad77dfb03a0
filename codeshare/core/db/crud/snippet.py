from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.db.crud.base import BaseDB
from codeshare.core.db.crud.share_link import ShareLinkDB
from codeshare.core.db.models.share_link import ShareLink
from codeshare.core.db.models.snippet import Snippet


class SnippetDB(BaseDB[Snippet]):
    """Database operations for snippets saved from the editor."""

    def __init__(self):
        super().__init__(model=Snippet)
        self.share_link_db = ShareLinkDB()

    async def get_owned(
        self, session: AsyncSession, snippet_id: UUID, account_id: UUID
    ) -> Snippet | None:
        return await self.get_one_by_conditions(
            session=session,
            conditions=[
                self.model.id == snippet_id,
                self.model.account_id == account_id,
                self.model.is_deleted == False,  # noqa: E712
            ],
        )

    async def list_for_account(
        self, session: AsyncSession, account_id: UUID
    ) -> Sequence[Snippet]:
        return await self.get_all(
            session=session,
            filters=[
                self.model.account_id == account_id,
                self.model.is_deleted == False,  # noqa: E712
            ],
            order_by=[self.model.created_at.desc(), self.model.id.desc()],
        )

    async def delete_owned(
        self,
        session: AsyncSession,
        snippet_id: UUID,
        account_id: UUID,
        commit_self: bool = True,
    ) -> bool:
        """
        Delete a snippet and every share link pointing at it.

        Returns:
            False if the snippet does not exist or belongs to another account.
        """
        snippet = await self.get_owned(session, snippet_id, account_id)
        if snippet is None:
            return False

        # SQLite does not enforce ON DELETE CASCADE without a pragma
        await self.share_link_db.delete_by_conditions(
            session=session,
            conditions=[ShareLink.snippet_id == snippet_id],
            commit_self=False,
        )
        return await self.delete(session, snippet_id, commit_self=commit_self)


__all__ = ["SnippetDB"]
