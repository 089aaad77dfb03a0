"""
Authentication router for account and session endpoints.

Endpoints:
- Signup, confirmed by a one-time code sent by email
- Requesting a new OTP
- Email login and logout with an HttpOnly session cookie
- Reading the current account

Routes are mounted at the application root.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import auth_logger, settings
from codeshare.core.dependencies import (
    CurrentAccount,
    SessionToken,
    get_async_session,
)
from codeshare.core.exceptions.types import (
    AccountNotVerifiedException,
    InvalidCredentialsException,
)
from codeshare.core.schemas import (
    AccountResponse,
    LoginRequest,
    MessageResponse,
    OTPVerifyRequest,
    RequestOTPRequest,
    SessionResponse,
    SignupRequest,
    SignupResponse,
)
from codeshare.core.services import (
    AuthService,
    EmailManagerService,
    IssuedSession,
    OTPService,
    SessionService,
)
from codeshare.core.utils import get_device_info, normalize_email


router = APIRouter()


# =============================================================================
# Cookie and request helpers
# =============================================================================


def _device_info(request: Request) -> str | None:
    return get_device_info(request.headers.get("User-Agent"))


def _set_session_cookie(response: Response, issued: IssuedSession) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=issued.token,
        max_age=issued.max_age,
        expires=issued.expires_at,
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_SAME_SITE_COOKIE_POLICY,
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_SAME_SITE_COOKIE_POLICY,
    )


# =============================================================================
# Signup & Verification
# =============================================================================


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up with email",
    description="""
## Create a New Account

Register with email and password. The account starts **unverified** and a
**6-digit code** is emailed to the address.

### Flow

1. **Submit signup** with email and password
2. **Receive the code** by email (valid for 10 minutes by default)
3. **Verify** with `POST /verify-otp`, which also signs you in

### Password Requirements

- Minimum **4 characters**
- At least **one uppercase letter**, **one lowercase letter** and **one digit**

### Error Responses

| Status | Reason |
|--------|--------|
| `409 Conflict` | Email already registered (verified or not) |
| `422 Unprocessable Entity` | Malformed email or weak password |
""",
    responses={
        409: {
            "description": "Email already registered",
            "content": {
                "application/json": {
                    "example": {"detail": "Email is already in use.", "kind": "conflict"}
                }
            },
        },
    },
)
async def signup(
    request_data: SignupRequest,
    background_tasks: BackgroundTasks,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> SignupResponse:
    """
    Create an unverified account and send its first OTP.

    The account and the code are stored in one transaction; the email goes
    out after the response.
    """
    async with session.begin():
        account = await AuthService.signup(
            session=session,
            email=request_data.email,
            password=request_data.password,
            commit_self=False,
        )
        otp_code = await OTPService.issue(
            session=session, email=account.email, commit_self=False
        )

    background_tasks.add_task(
        EmailManagerService.send_otp_email, account.email, otp_code
    )
    return SignupResponse(email=account.email)


@router.post(
    "/verify-otp",
    response_model=SessionResponse,
    summary="Verify email with OTP",
    description="""
## Verify an Email Address

Confirm the newest code sent to the email. On success the account is marked
verified and a **session cookie** is set, so no separate login is needed.

Only the most recently issued code is accepted; requesting a new code
cancels the previous one. Each code can be used once.

### Error Responses

| Status | `kind` | Reason |
|--------|--------|--------|
| `400` | `otp_invalid` | Wrong code, superseded code, or no code issued |
| `400` | `otp_expired` | Code is past its expiry |
| `400` | `otp_already_consumed` | Code was already used |
| `429` | `too_many_attempts` | Too many wrong guesses; request a new code |
""",
)
async def verify_otp(
    request: Request,
    response: Response,
    request_data: OTPVerifyRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> SessionResponse:
    """
    Confirm the OTP, verify the account and open a session.

    Failed guesses are committed by the OTP service itself; the success path
    commits the consumed code, the verified flag and the new session together.
    """
    confirmation = await OTPService.confirm(
        session=session,
        email=request_data.email,
        code=request_data.otp,
        commit_self=False,
    )
    issued = await SessionService.create_session(
        session=session,
        account=confirmation.account,
        device_info=_device_info(request),
        commit_self=False,
    )
    await session.commit()

    _set_session_cookie(response, issued)
    message = (
        "Email verified successfully"
        if confirmation.newly_verified
        else "Email already verified"
    )
    return SessionResponse(message=message, email=confirmation.email)


@router.post(
    "/request-otp",
    response_model=MessageResponse,
    summary="Request a new OTP",
    description="""
## Request a New Verification Code

Send a fresh code to the email of an existing account. Any earlier unused
code stops working immediately and the new code gets a full expiry window.
There is no need to wait for the previous code to expire.

### Error Responses

| Status | Reason |
|--------|--------|
| `404 Not Found` | No account for this email |
""",
)
async def request_otp(
    request_data: RequestOTPRequest,
    background_tasks: BackgroundTasks,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> MessageResponse:
    async with session.begin():
        otp_code = await OTPService.issue(
            session=session, email=request_data.email, commit_self=False
        )

    email = normalize_email(request_data.email)
    background_tasks.add_task(EmailManagerService.send_otp_email, email, otp_code)
    return MessageResponse(message="A new verification code has been sent")


# =============================================================================
# Login & Logout
# =============================================================================


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Log in with email",
    description="""
## Log In

Authenticate with email and password. On success a **session cookie** is set
that stays valid for 24 hours by default.

Wrong passwords, unknown emails and unverified accounts all get the same
`401` response.
""",
)
async def login(
    request: Request,
    response: Response,
    request_data: LoginRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> SessionResponse:
    try:
        async with session.begin():
            issued = await SessionService.login(
                session=session,
                email=request_data.email,
                password=request_data.password,
                device_info=_device_info(request),
                commit_self=False,
            )
    except AccountNotVerifiedException:
        auth_logger.info(f"Login rejected for unverified account {request_data.email}")
        raise InvalidCredentialsException()

    _set_session_cookie(response, issued)
    return SessionResponse(message="Login successful", email=issued.account.email)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="""
## Log Out

Revoke the current session and clear the cookie. Always succeeds, even when
the session is already expired, revoked or missing.
""",
)
async def logout(
    response: Response,
    token: SessionToken,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> MessageResponse:
    await SessionService.logout(session=session, token=token, commit_self=True)
    _clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=AccountResponse,
    summary="Current account",
)
async def me(account: CurrentAccount) -> AccountResponse:
    """Return the account behind the session cookie."""
    return AccountResponse(
        email=account.email,
        verified=account.verified,
        created_at=account.created_at,
    )
