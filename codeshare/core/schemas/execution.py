from typing import Annotated

from pydantic import Field

from codeshare.core.enums import Language
from codeshare.core.schemas.base import CamelModel


class ExecuteRequest(CamelModel):
    language: Language
    code: Annotated[str, Field(min_length=1, max_length=100_000)]
    input: Annotated[str, Field(max_length=100_000)] = ""


class ExecuteResponse(CamelModel):
    output: str = ""
    error: str | None = None


__all__ = ["ExecuteRequest", "ExecuteResponse"]
