"""
Account model: the credential record behind signup, OTP verification and login.

"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.core.db.models.base import BaseModel

if TYPE_CHECKING:
    from codeshare.core.db.models.snippet import Snippet


class Account(BaseModel):
    """
    A registered email/password account.

    Attributes:
        email: Normalised (stripped, lower-cased) email, unique across all accounts.
        password_hash: bcrypt hash of the password. The raw password is never stored.
        verified: Set once, by the first successful OTP confirmation.
    """

    __tablename__ = "accounts"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    snippets: Mapped[list["Snippet"]] = relationship(  # noqa: F821
        "Snippet",
        back_populates="account",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email}, verified={self.verified})>"


__all__ = ["Account"]
