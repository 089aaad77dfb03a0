"""Shared dependencies for FastAPI endpoints."""

from codeshare.core.dependencies.auth import (
    CurrentAccount,
    SessionToken,
    get_current_account,
    get_session_token,
    session_cookie_scheme,
)
from codeshare.core.dependencies.db import get_async_session

__all__ = [
    "CurrentAccount",
    "SessionToken",
    "get_async_session",
    "get_current_account",
    "get_session_token",
    "session_cookie_scheme",
]
