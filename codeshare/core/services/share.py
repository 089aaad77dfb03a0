"""
Share Service: expiring public links to owned snippets.

Anyone holding a share token can read the snippet until the link expires.
Resolving an expired, unknown or malformed token fails the same way so a
caller learns nothing about which tokens once existed.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import re
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import settings, share_logger
from codeshare.core.db.crud import share_link_db, snippet_db
from codeshare.core.db.models import Account
from codeshare.core.enums import Language
from codeshare.core.exceptions.types import (
    DatabaseException,
    InvalidTTLException,
    NotOwnerException,
    ShareLinkNotFoundException,
)
from codeshare.core.services.base import SingletonService
from codeshare.core.utils import ensure_utc, generate_token, hash_token, utc_now


__all__ = ["ShareService", "ShareLinkGrant", "SharedSnippet"]

# token_urlsafe alphabet; anything else cannot have been issued
_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


@dataclass
class ShareLinkGrant:
    token: str
    snippet_id: UUID
    created_at: datetime
    expires_at: datetime


@dataclass
class SharedSnippet:
    language: Language
    code: str
    expires_at: datetime


class ShareService(SingletonService):
    @classmethod
    def init(cls) -> None:
        cls._initialized = True
        share_logger.info("ShareService initialized")

    @classmethod
    def _validate_ttl(cls, ttl_minutes: int) -> None:
        if ttl_minutes < 1:
            raise InvalidTTLException("Expiration must be at least 1 minute.")
        if ttl_minutes > settings.SHARE_MAX_TTL_MINUTES:
            raise InvalidTTLException(
                f"Expiration must be at most {settings.SHARE_MAX_TTL_MINUTES} minutes."
            )

    @classmethod
    async def _new_token(cls, session: AsyncSession) -> str:
        """
        Draw a token whose digest is not in the store yet.

        With 192 bits of entropy a retry is practically never needed; the
        unique index on ``token_hash`` backs this check.
        """
        for _ in range(settings.SHARE_TOKEN_MAX_ATTEMPTS):
            token = generate_token(settings.SHARE_TOKEN_BYTES)
            if not await share_link_db.token_hash_exists(session, hash_token(token)):
                return token
            share_logger.warning("Share token collision, drawing a new token")
        raise DatabaseException("Could not allocate a unique share token.")

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        owner: Account,
        snippet_id: UUID,
        ttl_minutes: int,
        commit_self: bool = True,
    ) -> ShareLinkGrant:
        """
        Create a share link for a snippet owned by ``owner``.

        Earlier links for the same snippet keep their own expiry.

        Args:
            session: The database session.
            owner: The account of the current session.
            snippet_id: The snippet to share.
            ttl_minutes: Lifetime of the link, 1 to ``SHARE_MAX_TTL_MINUTES``.
            commit_self: If True, commits the transaction.

        Returns:
            ShareLinkGrant: The raw token and the link's timestamps.

        Raises:
            InvalidTTLException: If ``ttl_minutes`` is out of range.
            NotOwnerException: If the snippet does not exist or is not owned by ``owner``.
        """
        cls._validate_ttl(ttl_minutes)

        snippet = await snippet_db.get_owned(session, snippet_id, owner.id)
        if snippet is None:
            share_logger.warning(
                f"Share refused: {owner.email} does not own snippet {snippet_id}"
            )
            raise NotOwnerException()

        token = await cls._new_token(session)
        created_at = utc_now()
        expires_at = created_at + timedelta(minutes=ttl_minutes)

        await share_link_db.create(
            session=session,
            data={
                "token_hash": hash_token(token),
                "snippet_id": snippet.id,
                "created_at": created_at,
                "expires_at": expires_at,
            },
            commit_self=commit_self,
        )

        share_logger.info(
            f"Share link created: snippet={snippet.id}, owner={owner.email}, ttl={ttl_minutes}m"
        )
        return ShareLinkGrant(
            token=token,
            snippet_id=snippet.id,
            created_at=created_at,
            expires_at=expires_at,
        )

    @classmethod
    async def resolve(cls, session: AsyncSession, token: str) -> SharedSnippet:
        """
        Return the shared snippet for a live token. No session is required.

        Raises:
            ShareLinkNotFoundException: For malformed, unknown and expired tokens alike.
        """
        if not _TOKEN_PATTERN.match(token or ""):
            raise ShareLinkNotFoundException()

        link = await share_link_db.get_by_token_hash(session, hash_token(token))
        if link is None or link.snippet is None:
            raise ShareLinkNotFoundException()

        expires_at = ensure_utc(link.expires_at)
        if utc_now() >= expires_at:
            raise ShareLinkNotFoundException()

        return SharedSnippet(
            language=link.snippet.language,
            code=link.snippet.code,
            expires_at=expires_at,
        )
