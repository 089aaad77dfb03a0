from enum import Enum


class Language(str, Enum):
    """Languages the sandbox can run and the editor can highlight."""

    PYTHON = "python"
    GO = "go"
    CPP = "cpp"
    JAVA = "java"
    JAVASCRIPT = "javascript"


class ErrorKind(str, Enum):
    """Stable, machine-readable error kinds returned alongside error messages."""

    VALIDATION_ERROR = "validation_error"
    AUTHENTICATION_ERROR = "authentication_error"
    AUTHORIZATION_ERROR = "authorization_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_TTL = "invalid_ttl"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    OTP_INVALID = "otp_invalid"
    OTP_EXPIRED = "otp_expired"
    OTP_ALREADY_CONSUMED = "otp_already_consumed"
    DATABASE_ERROR = "database_error"
    SANDBOX_UNAVAILABLE = "sandbox_unavailable"
    INTERNAL_ERROR = "internal_error"
