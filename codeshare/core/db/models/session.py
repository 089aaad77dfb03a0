"""
Session model backing the opaque session cookie.

"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.core.db.models.account import Account
from codeshare.core.db.models.base import BaseModel, timestamp_column


class Session(BaseModel):
    """
    Server-side session state keyed by the digest of the cookie value.

    Attributes:
        token_hash: SHA256 hash of the cookie token (the raw token is never stored).
        account_id: The authenticated account.
        email: Back-reference to the account's email.
        expires_at: Absolute expiry fixed at issuance.
        revoked_at: When the session was logged out (None while active).
        device_info: Short description of the client that logged in.
    """

    __tablename__ = "sessions"

    token_hash: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    expires_at: Mapped[datetime] = timestamp_column(
        nullable=False,
        index=True,
    )

    revoked_at: Mapped[datetime | None] = timestamp_column(
        nullable=True,
    )

    device_info: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    account: Mapped[Account] = relationship(
        "Account",
        foreign_keys=[account_id],
    )

    def __repr__(self) -> str:
        return (
            f"<Session(id={self.id}, account_id={self.account_id}, "
            f"expires_at={self.expires_at}, revoked={self.revoked_at is not None})>"
        )


__all__ = ["Session"]
