from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import ConfigDict, Field

from codeshare.core.enums import Language
from codeshare.core.schemas.base import CamelModel


class SnippetCreateRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"language": "python", "code": "print('hello')"}
        }
    )

    language: Language
    code: Annotated[str, Field(min_length=1, max_length=100_000)]


class SnippetCreateResponse(CamelModel):
    message: str = "Code saved successfully"
    id: UUID


class SnippetResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    language: Language
    code: str
    created_at: datetime


__all__ = ["SnippetCreateRequest", "SnippetCreateResponse", "SnippetResponse"]
