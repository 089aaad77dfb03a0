from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from codeshare.core.enums import Language
from codeshare.core.schemas.base import CamelModel


class ShareCreateRequest(CamelModel):
    """
    Request schema for creating a share link.

    ``expirationMinutes`` is range-checked by the share service so that an
    out-of-range value is reported as an invalid expiration, not a schema error.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "codeId": "0b9f8a3e-3c1f-4b8e-9a53-5d1f3f0c2a77",
                "expirationMinutes": 60,
            }
        }
    )

    code_id: UUID = Field(description="Snippet to share")
    expiration_minutes: int = Field(description="Link lifetime in minutes")


class ShareCreateResponse(CamelModel):
    message: str = "Share link created successfully"
    token: str
    expires_at: datetime
    created_at: datetime


class SharedCodeResponse(CamelModel):
    code: str
    language: Language
    expires_at: datetime


__all__ = ["ShareCreateRequest", "ShareCreateResponse", "SharedCodeResponse"]
