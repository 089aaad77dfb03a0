"""
Share link router.

Creating a link needs a session; resolving one does not. Resolution answers
unknown, malformed and expired tokens with the same 404.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.dependencies import CurrentAccount, get_async_session
from codeshare.core.schemas import (
    ShareCreateRequest,
    ShareCreateResponse,
    SharedCodeResponse,
)
from codeshare.core.services import ShareService


router = APIRouter(prefix="/share")


@router.post(
    "",
    response_model=ShareCreateResponse,
    summary="Create a share link",
    description="""
## Share a Snippet

Create a link to one of your snippets that stops working after
`expirationMinutes`. Anyone with the token can read the snippet until then.

Older links to the same snippet keep their own expiry.

### Error Responses

| Status | `kind` | Reason |
|--------|--------|--------|
| `400` | `invalid_ttl` | `expirationMinutes` below 1 or above the maximum |
| `401` | `authentication_error` | Missing or invalid session |
| `403` | `authorization_error` | Snippet missing or owned by another account |
""",
)
async def create_share_link(
    request_data: ShareCreateRequest,
    account: CurrentAccount,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ShareCreateResponse:
    grant = await ShareService.create(
        session=session,
        owner=account,
        snippet_id=request_data.code_id,
        ttl_minutes=request_data.expiration_minutes,
    )
    return ShareCreateResponse(
        token=grant.token,
        expires_at=grant.expires_at,
        created_at=grant.created_at,
    )


@router.get(
    "/{token}",
    response_model=SharedCodeResponse,
    summary="Open a share link",
    responses={
        404: {
            "description": "Unknown or expired token",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Shared code not found or expired",
                        "kind": "not_found",
                    }
                }
            },
        },
    },
)
async def resolve_share_link(
    token: str,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> SharedCodeResponse:
    shared = await ShareService.resolve(session, token)
    return SharedCodeResponse(
        code=shared.code,
        language=shared.language,
        expires_at=shared.expires_at,
    )
