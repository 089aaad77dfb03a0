"""
Helpers shared across services and routers.

- Email normalisation and UTC timestamps
- bcrypt password hashing
- Numeric OTP generation and keyed (HMAC-SHA256) storage digests
- Opaque random tokens for sessions and share links
- OpenAPI export
"""

from datetime import datetime, timezone
import hashlib
import hmac
import json
import secrets

import aiofiles
import bcrypt
from fastapi import FastAPI

from codeshare.core.config import utils_logger

# bcrypt ignores everything past this many bytes
BCRYPT_MAX_BYTES = 72

# First match wins, so more specific markers come first
_PLATFORM_MARKERS = (
    (("iPhone", "iPad"), "iOS"),
    (("Android",), "Android"),
    (("Windows",), "Windows"),
    (("Mac OS X", "Macintosh"), "macOS"),
    (("Linux",), "Linux"),
)
_BROWSER_MARKERS = (
    (("Edg/",), "Edge"),
    (("Firefox",), "Firefox"),
    (("Chrome",), "Chrome"),
    (("Safari",), "Safari"),
)


def normalize_email(email: str) -> str:
    """
    Canonical form used for every email lookup and uniqueness check.

    Examples:
        >>> normalize_email("  A@X.com ")
        'a@x.com'
    """
    return email.strip().lower()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Attach or convert to UTC.

    SQLite hands back naive datetimes for ``DateTime(timezone=True)``
    columns; everything is written in UTC, so naive means UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str | None) -> str:
    """
    Salted bcrypt hash of ``password``.

    Raises:
        ValueError: If ``password`` is None.
    """
    if password is None:
        utils_logger.error("hash_password called without a password")
        raise ValueError("Password cannot be None")
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str | None, hashed_password: str | None) -> bool:
    """
    Check ``password`` against a bcrypt hash.

    Missing values and malformed hashes count as a mismatch rather than an error.
    """
    if password is None or hashed_password is None:
        return False
    try:
        return bcrypt.checkpw(_bcrypt_input(password), hashed_password.encode("utf-8"))
    except ValueError:
        utils_logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def generate_otp_code(length: int = 6) -> str:
    """Uniformly random decimal code of ``length`` digits, leading zeros allowed."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def mask_otp(otp: str) -> str:
    """
    Log-safe form of a code.

    Examples:
        >>> mask_otp("123456")
        '1****6'
    """
    if len(otp) <= 2:
        return otp
    return otp[0] + "*" * (len(otp) - 2) + otp[-1]


def hmac_hash_otp(otp: str | None, secret: str | None) -> str:
    """
    Keyed digest of an OTP code as 64 hex characters.

    A six digit code has only a million values, so a plain hash could be
    reversed by enumeration; the server-side key prevents that.

    Raises:
        ValueError: If ``otp`` or ``secret`` is empty.
    """
    if not otp:
        raise ValueError("OTP cannot be None or empty")
    if not secret:
        raise ValueError("Secret cannot be None or empty")
    return hmac.new(secret.encode("utf-8"), otp.encode("utf-8"), hashlib.sha256).hexdigest()


def hmac_verify_otp(
    otp: str | None, hashed_otp: str | None, secret: str | None
) -> bool:
    """Constant-time check of ``otp`` against a digest from :func:`hmac_hash_otp`."""
    if not (otp and hashed_otp and secret):
        return False
    return hmac.compare_digest(hmac_hash_otp(otp, secret), hashed_otp)


def generate_token(num_bytes: int = 32) -> str:
    """URL-safe random token carrying ``num_bytes`` bytes of entropy."""
    return secrets.token_urlsafe(num_bytes)


def hash_token(token: str) -> str:
    """
    SHA-256 hex digest under which a token is stored.

    The tokens are high-entropy, so no key or salt is needed.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _first_marker(user_agent: str, table) -> str | None:
    for markers, label in table:
        if any(marker in user_agent for marker in markers):
            return label
    return None


def get_device_info(user_agent: str | None) -> str | None:
    """
    Short "platform / browser" label for a User-Agent, kept with each session.

    Examples:
        >>> get_device_info("Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0")
        'Windows / Chrome'
    """
    if not user_agent:
        return None
    parts = [
        label
        for label in (
            _first_marker(user_agent, _PLATFORM_MARKERS),
            _first_marker(user_agent, _BROWSER_MARKERS),
        )
        if label
    ]
    return " / ".join(parts) if parts else user_agent[:100]


def generate_openapi_json(app: FastAPI) -> str:
    return json.dumps(app.openapi(), indent=4)


async def write_to_file_async(file_path: str, data: str) -> None:
    """
    Write ``data`` to ``file_path`` without blocking the event loop.

    Raises:
        OSError: If the file cannot be written.
    """
    try:
        async with aiofiles.open(file_path, mode="w", encoding="utf-8") as file:
            await file.write(data)
    except OSError as e:
        utils_logger.error(f"Could not write {file_path}: {e}")
        raise
    utils_logger.info(f"Wrote {file_path}")


__all__ = [
    "normalize_email",
    "utc_now",
    "ensure_utc",
    "hash_password",
    "verify_password",
    "generate_otp_code",
    "mask_otp",
    "hmac_hash_otp",
    "hmac_verify_otp",
    "generate_token",
    "hash_token",
    "get_device_info",
    "generate_openapi_json",
    "write_to_file_async",
]
