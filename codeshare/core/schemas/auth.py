"""
Request and response bodies for signup, verification, login and ``/me``.
"""

from datetime import datetime
from typing import Annotated

from pydantic import ConfigDict, EmailStr, Field, StringConstraints, field_validator

from codeshare.core.config import settings
from codeshare.core.schemas.base import CamelModel

_EXAMPLE_EMAIL = "user@example.com"
_EXAMPLE_PASSWORD = "SecurePass123"

# (predicate, what is missing) checked in order; first failure wins
_PASSWORD_RULES = (
    (str.isupper, "an uppercase letter"),
    (str.islower, "a lowercase letter"),
    (str.isdigit, "a digit"),
)

PasswordStr = Annotated[
    str,
    StringConstraints(min_length=4, max_length=128),
    Field(description="At least 4 characters with upper case, lower case and a digit"),
]

OTPCodeStr = Annotated[
    str,
    # ASCII digits only
    StringConstraints(
        strip_whitespace=True, pattern=rf"^[0-9]{{{settings.OTP_LENGTH}}}$"
    ),
    Field(
        description=f"{settings.OTP_LENGTH} digit code from the verification email"
    ),
]

AccountEmail = Annotated[EmailStr, Field(description="Account email address")]


class SignupRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": _EXAMPLE_EMAIL, "password": _EXAMPLE_PASSWORD}
        }
    )

    email: AccountEmail
    password: PasswordStr

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        for predicate, missing in _PASSWORD_RULES:
            if not any(predicate(ch) for ch in v):
                raise ValueError(f"Password needs at least {missing}")
        return v


class SignupResponse(CamelModel):
    """Signup never logs in; the account stays unverified until the code is used."""

    message: str = "Verification code sent to your email"
    email: EmailStr
    requires_verification: bool = True


class OTPVerifyRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"email": _EXAMPLE_EMAIL, "otp": "123456"}}
    )

    email: AccountEmail
    otp: OTPCodeStr


class RequestOTPRequest(CamelModel):
    model_config = ConfigDict(json_schema_extra={"example": {"email": _EXAMPLE_EMAIL}})

    email: AccountEmail


class LoginRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": _EXAMPLE_EMAIL, "password": _EXAMPLE_PASSWORD}
        }
    )

    email: AccountEmail
    # Complexity is only enforced at signup
    password: Annotated[str, StringConstraints(min_length=1, max_length=128)]


class SessionResponse(CamelModel):
    """Body returned next to a new session cookie. The token is never in the body."""

    message: str
    email: EmailStr


class AccountResponse(CamelModel):
    email: EmailStr
    verified: bool
    created_at: datetime


__all__ = [
    "PasswordStr",
    "OTPCodeStr",
    "SignupRequest",
    "SignupResponse",
    "OTPVerifyRequest",
    "RequestOTPRequest",
    "LoginRequest",
    "SessionResponse",
    "AccountResponse",
]
