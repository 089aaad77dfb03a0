"""
JSON error responses.

Every error body is ``{"detail": ..., "kind": ...}`` plus ``details`` when the
exception carries any. Client errors are logged as warnings and server-side
failures as errors.
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from codeshare.core.config import request_logger
from codeshare.core.enums import ErrorKind
from codeshare.core.exceptions.types import (
    AppException,
    AuthenticationException,
    BadRequestException,
    ConflictException,
    DatabaseException,
    ForbiddenException,
    NotFoundException,
    OTPAlreadyConsumedException,
    OTPExpiredException,
    OTPInvalidException,
    SandboxUnavailableException,
    TooManyAttemptsException,
)


def _error_content(exc: AppException, detail: str | None = None) -> dict:
    content: dict = {"detail": detail or exc.message, "kind": exc.kind.value}
    if exc.details:
        content["details"] = exc.details
    return content


def _respond(
    request: Request,
    exc: AppException,
    server_error: bool = False,
    detail: str | None = None,
) -> JSONResponse:
    log = request_logger.error if server_error else request_logger.warning
    log(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code, content=_error_content(exc, detail)
    )


async def general_exception_handler(request: Request, exc: AppException):
    """Fallback for any AppException without a dedicated handler."""
    return _respond(
        request, exc, exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
    )


async def database_exception_handler(request: Request, exc: DatabaseException):
    """The driver message goes to the log only; clients get a fixed text."""
    return _respond(
        request, exc, server_error=True, detail=DatabaseException.default_message
    )


async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
):
    return _respond(request, exc)


async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    return _respond(request, exc)


async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return _respond(request, exc)


async def conflict_exception_handler(request: Request, exc: ConflictException):
    return _respond(request, exc)


async def bad_request_exception_handler(request: Request, exc: BadRequestException):
    return _respond(request, exc)


async def otp_expired_exception_handler(request: Request, exc: OTPExpiredException):
    return _respond(request, exc)


async def otp_invalid_exception_handler(request: Request, exc: OTPInvalidException):
    return _respond(request, exc)


async def otp_already_consumed_exception_handler(
    request: Request, exc: OTPAlreadyConsumedException
):
    return _respond(request, exc)


async def too_many_attempts_exception_handler(
    request: Request, exc: TooManyAttemptsException
):
    return _respond(request, exc)


async def sandbox_unavailable_exception_handler(
    request: Request, exc: SandboxUnavailableException
):
    return _respond(request, exc, server_error=True)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Malformed request bodies, paths and queries.

    FastAPI's list of error entries is kept under ``detail``.
    """
    request_logger.warning(f"Request validation failed on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "kind": ErrorKind.VALIDATION_ERROR.value,
        },
    )


def _example(description: str, detail: str, kind: ErrorKind) -> dict:
    return {
        "description": description,
        "content": {
            "application/json": {"example": {"detail": detail, "kind": kind.value}}
        },
    }


exception_schema = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: _example(
        "Internal Server Error",
        DatabaseException.default_message,
        ErrorKind.DATABASE_ERROR,
    ),
    status.HTTP_401_UNAUTHORIZED: _example(
        "Not authenticated",
        "Invalid or expired session.",
        ErrorKind.AUTHENTICATION_ERROR,
    ),
}


# Ordered most specific first
EXCEPTION_HANDLERS = (
    (OTPExpiredException, otp_expired_exception_handler),
    (OTPInvalidException, otp_invalid_exception_handler),
    (OTPAlreadyConsumedException, otp_already_consumed_exception_handler),
    (TooManyAttemptsException, too_many_attempts_exception_handler),
    (AuthenticationException, authentication_exception_handler),
    (ForbiddenException, forbidden_exception_handler),
    (NotFoundException, not_found_exception_handler),
    (ConflictException, conflict_exception_handler),
    (BadRequestException, bad_request_exception_handler),
    (DatabaseException, database_exception_handler),
    (SandboxUnavailableException, sandbox_unavailable_exception_handler),
    (RequestValidationError, validation_exception_handler),
    (AppException, general_exception_handler),
)


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class, handler in EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, handler)


__all__ = [
    "general_exception_handler",
    "database_exception_handler",
    "authentication_exception_handler",
    "forbidden_exception_handler",
    "not_found_exception_handler",
    "conflict_exception_handler",
    "bad_request_exception_handler",
    "otp_expired_exception_handler",
    "otp_invalid_exception_handler",
    "otp_already_consumed_exception_handler",
    "too_many_attempts_exception_handler",
    "sandbox_unavailable_exception_handler",
    "validation_exception_handler",
    "exception_schema",
    "EXCEPTION_HANDLERS",
    "register_exception_handlers",
]
