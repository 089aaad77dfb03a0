"""
OTP model for storing one-time passcodes sent to an account's email.

"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.core.db.models.account import Account
from codeshare.core.db.models.base import BaseModel, timestamp_column


class OTPCode(BaseModel):
    """
    Model for storing OTP (One-Time Password) codes.

    Codes are stored as HMAC-SHA256 hashes. Issuing a new code for an email
    soft-deletes every earlier unused code for it, so the newest row that is
    not deleted is the only one that can be confirmed.

    Attributes:
        account_id: The account the code verifies.
        email: Normalised email address the code was sent to.
        code_hash: HMAC-SHA256 hash of the code.
        expires_at: When the code expires.
        used_at: When the code was consumed (None while unconsumed).
        attempts: Number of failed guesses against this code.
    """

    __tablename__ = "otp_codes"

    account_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    code_hash: Mapped[str] = mapped_column(
        String(64),  # SHA256 hex digest
        nullable=False,
    )

    expires_at: Mapped[datetime] = timestamp_column(
        nullable=False,
        index=True,
    )

    used_at: Mapped[datetime | None] = timestamp_column(
        nullable=True,
    )

    attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    account: Mapped[Account] = relationship(
        "Account",
        foreign_keys=[account_id],
    )

    @property
    def consumed(self) -> bool:
        return self.used_at is not None


__all__ = ["OTPCode"]
