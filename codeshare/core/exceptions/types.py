"""
Domain errors raised by services and turned into JSON by the handlers.

Every error carries an HTTP status and a stable :class:`ErrorKind` that
clients can branch on. Subclasses only declare those two plus a default
message.
"""

from fastapi import status

from codeshare.core.enums import ErrorKind


class AppException(Exception):
    """Root of every error the API reports deliberately."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong."

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status
        self.details = details
        super().__init__(self.message)


class DatabaseException(AppException):
    kind = ErrorKind.DATABASE_ERROR
    default_message = "A database error occurred."


# 401


class AuthenticationException(AppException):
    kind = ErrorKind.AUTHENTICATION_ERROR
    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required."


class InvalidCredentialsException(AuthenticationException):
    """Wrong password, unknown email and unverified account all look like this."""

    default_message = "Invalid email or password."


class AccountNotVerifiedException(AuthenticationException):
    default_message = "Account has not been verified."


class InvalidSessionException(AuthenticationException):
    """Missing, unknown, revoked or expired session cookie."""

    default_message = "Invalid or expired session."


# OTP verification


class OTPExpiredException(AppException):
    kind = ErrorKind.OTP_EXPIRED
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Verification code has expired, request a new one."


class OTPInvalidException(AppException):
    kind = ErrorKind.OTP_INVALID
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Verification code is incorrect."


class OTPAlreadyConsumedException(AppException):
    kind = ErrorKind.OTP_ALREADY_CONSUMED
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Verification code was already used."


class TooManyAttemptsException(AppException):
    kind = ErrorKind.TOO_MANY_ATTEMPTS
    default_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many wrong codes, request a new one."


# 404


class NotFoundException(AppException):
    kind = ErrorKind.NOT_FOUND
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class UserNotFoundException(NotFoundException):
    default_message = "Account not found."


class SnippetNotFoundException(NotFoundException):
    """Also raised for snippets owned by someone else."""

    default_message = "Code not found."


class ShareLinkNotFoundException(NotFoundException):
    """Unknown, malformed and expired tokens are reported identically."""

    default_message = "Shared code not found or expired"


# 409


class ConflictException(AppException):
    kind = ErrorKind.CONFLICT
    default_status = status.HTTP_409_CONFLICT
    default_message = "Conflicts with an existing resource."


class UserAlreadyExistsException(ConflictException):
    default_message = "Email is already in use."


# 400


class BadRequestException(AppException):
    kind = ErrorKind.VALIDATION_ERROR
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request."


class InvalidTTLException(BadRequestException):
    kind = ErrorKind.INVALID_TTL
    default_message = "Invalid expiration time."


# 403


class ForbiddenException(AppException):
    kind = ErrorKind.AUTHORIZATION_ERROR
    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed."


class NotOwnerException(ForbiddenException):
    default_message = "You do not own this code."


# 503


class SandboxUnavailableException(AppException):
    kind = ErrorKind.SANDBOX_UNAVAILABLE
    default_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Code execution service is unavailable."

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message, details=details)


__all__ = [
    "AppException",
    "DatabaseException",
    "AuthenticationException",
    "InvalidCredentialsException",
    "AccountNotVerifiedException",
    "InvalidSessionException",
    "OTPExpiredException",
    "OTPInvalidException",
    "OTPAlreadyConsumedException",
    "TooManyAttemptsException",
    "NotFoundException",
    "UserNotFoundException",
    "SnippetNotFoundException",
    "ShareLinkNotFoundException",
    "ConflictException",
    "UserAlreadyExistsException",
    "BadRequestException",
    "InvalidTTLException",
    "ForbiddenException",
    "NotOwnerException",
    "SandboxUnavailableException",
]
