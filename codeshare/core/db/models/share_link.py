"""
Share link model: an expiring, anonymous read grant on one snippet.

"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.core.db.models.base import BaseModel, timestamp_column
from codeshare.core.db.models.snippet import Snippet


class ShareLink(BaseModel):
    """
    Maps the digest of a share token to a snippet until ``expires_at``.

    Rows are never updated. Expiry is checked when the token is resolved,
    so an expired row that has not been purged yet still resolves as absent.

    Attributes:
        token_hash: SHA256 hash of the share token.
        snippet_id: The shared snippet.
        expires_at: ``created_at`` plus the requested lifetime.
    """

    __tablename__ = "share_links"

    token_hash: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )

    snippet_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("snippets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    expires_at: Mapped[datetime] = timestamp_column(
        nullable=False,
        index=True,
    )

    snippet: Mapped[Snippet] = relationship(
        "Snippet",
        foreign_keys=[snippet_id],
    )


__all__ = ["ShareLink"]
