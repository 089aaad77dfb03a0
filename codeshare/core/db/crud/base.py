"""
Generic async repository shared by every CRUD class.

Writes take ``commit_self``: True commits, False only flushes so the caller
can group several writes in one transaction. Driver errors surface as
:class:`DatabaseException`.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import (
    SQLColumnExpression,
    and_,
    delete as sa_delete,
    select,
    update as sa_update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.exceptions.types import DatabaseException

T = TypeVar("T")


class BaseDB(Generic[T]):
    def __init__(self, model: Type[T]):
        self.model = model

    def _error(self, action: str, exc: SQLAlchemyError) -> DatabaseException:
        return DatabaseException(f"{action} {self.model.__name__} failed: {exc}")

    async def _finish(self, session: AsyncSession, commit_self: bool) -> None:
        if commit_self:
            await session.commit()
        else:
            await session.flush()

    async def get_by_id(
        self, session: AsyncSession, id: UUID, options: list[Any] = []
    ) -> T | None:
        """Fetch one row by primary key, or None."""
        try:
            stmt = select(self.model).options(*options).where(self.model.id == id)  # type: ignore[attr-defined]
            return (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._error(f"Loading {id} of", e) from e

    async def get_all(
        self,
        session: AsyncSession,
        filters: list[Any] | None = None,
        order_by: list[Any] | None = None,
        limit: int | None = None,
        options: list[Any] = [],
    ) -> Sequence[T]:
        """
        Fetch every row matching ``filters``.

        Args:
            session: Async SQLAlchemy session.
            filters: SQLAlchemy filter expressions, ANDed together.
            order_by: Columns or expressions to sort by.
            limit: Maximum number of rows.
            options: Loader options such as ``selectinload``.
        """
        stmt = select(self.model).options(*options)
        if filters:
            stmt = stmt.where(and_(*filters))
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit:
            stmt = stmt.limit(limit)
        try:
            return (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise self._error("Listing", e) from e

    async def get_one_by_conditions(
        self,
        session: AsyncSession,
        conditions: Sequence[SQLColumnExpression],
        options: list[Any] = [],
    ) -> T | None:
        """Fetch the first row matching every condition, or None."""
        try:
            stmt = select(self.model).options(*options).where(and_(*conditions))
            return (await session.execute(stmt)).scalars().first()
        except SQLAlchemyError as e:
            raise self._error("Looking up", e) from e

    async def exists(self, session: AsyncSession, filters: dict) -> bool:
        """True if a row with the given column values exists."""
        try:
            stmt = select(self.model.id).filter_by(**filters).limit(1)  # type: ignore[attr-defined]
            return (await session.execute(stmt)).first() is not None
        except SQLAlchemyError as e:
            raise self._error("Existence check on", e) from e

    async def create(
        self,
        session: AsyncSession,
        data: dict,
        commit_self: bool = True,
    ) -> T:
        """
        Insert a row built from ``data`` and return it refreshed from the database.

        Raises:
            DatabaseException: On any driver error, including constraint violations.
        """
        obj = self.model(**data)
        try:
            session.add(obj)
            await self._finish(session, commit_self)
            await session.refresh(obj)
        except SQLAlchemyError as e:
            raise self._error("Creating", e) from e
        return obj

    async def update_by_conditions(
        self,
        session: AsyncSession,
        conditions: list[SQLColumnExpression],
        updates: dict,
        commit_self: bool = True,
    ) -> int:
        """
        Apply ``updates`` to every row matching ``conditions`` in one statement.

        Conditions on the current column values make this an atomic
        compare-and-set; the returned row count tells whether it won.
        Objects already loaded in the session are not refreshed.

        Returns:
            int: Number of rows updated.
        """
        stmt = (
            sa_update(self.model)
            .where(and_(*conditions))
            .values(**updates)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await session.execute(stmt)
            await self._finish(session, commit_self)
        except SQLAlchemyError as e:
            raise self._error("Updating", e) from e
        return result.rowcount  # type: ignore[attr-defined]

    async def delete(
        self, session: AsyncSession, id: UUID, commit_self: bool = True
    ) -> bool:
        """Hard-delete one row by primary key. True if a row went away."""
        deleted = await self.delete_by_conditions(
            session, [self.model.id == id], commit_self=commit_self  # type: ignore[attr-defined]
        )
        return deleted > 0

    async def delete_by_conditions(
        self,
        session: AsyncSession,
        conditions: list[SQLColumnExpression],
        commit_self: bool = True,
    ) -> int:
        """
        Hard-delete every row matching ``conditions``.

        Returns:
            int: Number of rows deleted.
        """
        stmt = (
            sa_delete(self.model)
            .where(and_(*conditions))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await session.execute(stmt)
            await self._finish(session, commit_self)
        except SQLAlchemyError as e:
            raise self._error("Deleting", e) from e
        return result.rowcount  # type: ignore[attr-defined]

    async def soft_delete_by_conditions(
        self,
        session: AsyncSession,
        conditions: list[SQLColumnExpression],
        commit_self: bool = True,
    ) -> int:
        """
        Flag matching rows as deleted without removing them.

        Returns:
            int: Number of rows flagged.
        """
        now = datetime.now(timezone.utc)
        return await self.update_by_conditions(
            session=session,
            conditions=conditions,
            updates={"is_deleted": True, "deleted_at": now, "updated_at": now},
            commit_self=commit_self,
        )


__all__ = ["BaseDB"]
