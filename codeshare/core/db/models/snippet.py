from uuid import UUID

from sqlalchemy import Enum, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.core.db.models.account import Account
from codeshare.core.db.models.base import BaseModel
from codeshare.core.enums import Language


class Snippet(BaseModel):
    """A piece of code saved by an account from the editor."""

    __tablename__ = "snippets"

    account_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    language: Mapped[Language] = mapped_column(
        Enum(
            Language,
            native_enum=False,
            name="snippet_language",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    code: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    account: Mapped[Account] = relationship(
        "Account",
        back_populates="snippets",
    )


__all__ = ["Snippet"]
