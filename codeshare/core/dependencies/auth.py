"""
Authentication dependencies for FastAPI endpoints.

- Reading the session cookie
- Resolving it to the current, verified account

Example usage:
    from codeshare.core.dependencies import CurrentAccount

    @router.get("/me")
    async def me(account: CurrentAccount):
        return {"email": account.email}
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import settings
from codeshare.core.db.models import Account
from codeshare.core.dependencies.db import get_async_session
from codeshare.core.services.session import SessionService

# auto_error=False so a missing cookie goes through the same
# InvalidSessionException path as a bad one
session_cookie_scheme = APIKeyCookie(
    name=settings.SESSION_COOKIE_NAME,
    auto_error=False,
    description="Opaque session token set by /login or /verify-otp",
)


async def get_session_token(
    token: Annotated[str | None, Depends(session_cookie_scheme)],
) -> str | None:
    return token or None


async def get_current_account(
    token: Annotated[str | None, Depends(get_session_token)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> Account:
    """
    Resolve the session cookie to its account.

    Raises:
        InvalidSessionException: 401 if the cookie is missing, unknown,
            revoked or expired.
    """
    return await SessionService.validate(session, token)


CurrentAccount = Annotated[Account, Depends(get_current_account)]
SessionToken = Annotated[str | None, Depends(get_session_token)]


__all__ = [
    "session_cookie_scheme",
    "get_session_token",
    "get_current_account",
    "CurrentAccount",
    "SessionToken",
]
