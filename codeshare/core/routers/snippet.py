"""
Snippet router.

Signed-in accounts save editor contents here; a saved snippet's id is what
``POST /share`` takes as ``codeId``.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import snippet_logger
from codeshare.core.db.crud import snippet_db
from codeshare.core.dependencies import CurrentAccount, get_async_session
from codeshare.core.exceptions.types import SnippetNotFoundException
from codeshare.core.schemas import (
    MessageResponse,
    SnippetCreateRequest,
    SnippetCreateResponse,
    SnippetResponse,
)


router = APIRouter(prefix="/code")


@router.post(
    "",
    response_model=SnippetCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save code",
    description="""
## Save a Snippet

Store the editor contents under the current account. The returned `id` can
be shared with `POST /share`.

Requires a session cookie.
""",
)
async def create_snippet(
    request_data: SnippetCreateRequest,
    account: CurrentAccount,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> SnippetCreateResponse:
    snippet = await snippet_db.create(
        session=session,
        data={
            "account_id": account.id,
            "language": request_data.language,
            "code": request_data.code,
        },
    )
    snippet_logger.info(f"Snippet {snippet.id} saved by {account.email}")
    return SnippetCreateResponse(id=snippet.id)


@router.get(
    "",
    response_model=list[SnippetResponse],
    summary="List my code",
)
async def list_snippets(
    account: CurrentAccount,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> list[SnippetResponse]:
    """Newest first."""
    snippets = await snippet_db.list_for_account(session, account.id)
    return [SnippetResponse.model_validate(snippet) for snippet in snippets]


@router.get(
    "/{snippet_id}",
    response_model=SnippetResponse,
    summary="Get one of my snippets",
)
async def get_snippet(
    snippet_id: UUID,
    account: CurrentAccount,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> SnippetResponse:
    snippet = await snippet_db.get_owned(session, snippet_id, account.id)
    if snippet is None:
        raise SnippetNotFoundException()
    return SnippetResponse.model_validate(snippet)


@router.delete(
    "/{snippet_id}",
    response_model=MessageResponse,
    summary="Delete code",
    description="""
## Delete a Snippet

Deletes the snippet and every share link that points at it. Snippets of
other accounts are reported as not found.
""",
)
async def delete_snippet(
    snippet_id: UUID,
    account: CurrentAccount,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> MessageResponse:
    deleted = await snippet_db.delete_owned(session, snippet_id, account.id)
    if not deleted:
        raise SnippetNotFoundException()
    snippet_logger.info(f"Snippet {snippet_id} deleted by {account.email}")
    return MessageResponse(message="Code deleted successfully")
