from codeshare.core.schemas.auth import (
    AccountResponse,
    LoginRequest,
    OTPVerifyRequest,
    RequestOTPRequest,
    SessionResponse,
    SignupRequest,
    SignupResponse,
)
from codeshare.core.schemas.base import CamelModel, MessageResponse
from codeshare.core.schemas.execution import ExecuteRequest, ExecuteResponse
from codeshare.core.schemas.share import (
    ShareCreateRequest,
    ShareCreateResponse,
    SharedCodeResponse,
)
from codeshare.core.schemas.snippet import (
    SnippetCreateRequest,
    SnippetCreateResponse,
    SnippetResponse,
)

__all__ = [
    "AccountResponse",
    "CamelModel",
    "ExecuteRequest",
    "ExecuteResponse",
    "LoginRequest",
    "MessageResponse",
    "OTPVerifyRequest",
    "RequestOTPRequest",
    "SessionResponse",
    "ShareCreateRequest",
    "ShareCreateResponse",
    "SharedCodeResponse",
    "SignupRequest",
    "SignupResponse",
    "SnippetCreateRequest",
    "SnippetCreateResponse",
    "SnippetResponse",
]
