from functools import lru_cache
import logging
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codeshare.core.logger import setup_logger, init_sentry


class Settings(BaseSettings):
    # Application settings
    ENVIRONMENT: str = "development"  # Options: development, production
    API_DOMAIN: str = "http://localhost:8000"
    APP_NAME: str = "CodeShare"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = """
CodeShare is the backend of a browser code editor.

## Key Capabilities

| Area | Description |
|------|-------------|
| **Accounts** | Email/password signup gated by a one-time passcode sent by email. |
| **Sessions** | Opaque, HttpOnly cookie sessions with a fixed absolute lifetime. |
| **Snippets** | Save, list and delete code snippets owned by the signed-in account. |
| **Sharing** | Turn an owned snippet into a public link that expires after a chosen number of minutes. |
| **Execution** | Forward code to the sandbox service and relay its output. |

## Authentication

Endpoints that need an account read the session cookie set by `/login` or `/verify-otp`.
Resolving a share link never requires a session.
"""
    DEBUG: bool = False

    # CORS settings
    CORS_ALLOW_ORIGINS: list[str] = ["http://localhost:3000"]
    CORS_ALLOW_CREDENTIALS: bool = True

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./codeshare.db"

    # Session settings
    SESSION_COOKIE_NAME: str = "session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_SAME_SITE_COOKIE_POLICY: Literal["lax", "strict", "none"] = "lax"
    SESSION_EXPIRY_HOURS: int = 24
    SESSION_TOKEN_BYTES: int = 32

    # OTP settings
    OTP_LENGTH: int = 6
    OTP_EXPIRY_MINUTES: int = 10
    OTP_HMAC_SECRET: str = "otp_hmac_secret_key_change_in_production"
    OTP_MAX_ATTEMPTS: int = 5

    # Share link settings
    SHARE_TOKEN_BYTES: int = 24
    SHARE_MAX_TTL_MINUTES: int = 525600  # one year
    SHARE_TOKEN_MAX_ATTEMPTS: int = 3

    # Sandbox settings
    SANDBOX_URL: str = "http://localhost:8080"
    SANDBOX_TIMEOUT_SECONDS: float = 15.0

    # Brevo settings
    BREVO_API_KEY: str = "your_brevo_api_key"
    BREVO_BASE_URL: str = "https://api.brevo.com/v3"
    BREVO_SENDER_EMAIL: str = "your_brevo_sender_email"
    BREVO_SENDER_NAME: str = "your_brevo_sender_name"

    # Scheduler settings
    ENABLE_SCHEDULER: bool = True
    CLEANUP_INTERVAL_MINUTES: int = 60
    CLEANUP_RETENTION_HOURS: int = 24

    # Sentry settings
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    model_config: SettingsConfigDict = SettingsConfigDict(  # type: ignore
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _refuse_default_secrets_in_production(self) -> "Settings":
        if self.ENVIRONMENT != "production":
            return self
        defaults = type(self).model_fields
        unchanged = [
            name
            for name in ("OTP_HMAC_SECRET", "BREVO_API_KEY")
            if getattr(self, name) == defaults[name].default
        ]
        if unchanged:
            raise ValueError(
                "Refusing to start in production with default values for: "
                + ", ".join(unchanged)
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()  # type: ignore


settings = get_settings()

if not settings.DEBUG:
    init_sentry(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )


def _component_logger(component: str, log_name: str | None = None) -> logging.Logger:
    """``<component>_logger`` writing to ``logs/<log_name or component>.log``."""
    return setup_logger(
        name=f"{component}_logger",
        log_file=f"logs/{log_name or component}.log",
        level=logging.INFO,
        sentry_tag=component,
    )


app_logger = _component_logger("app")
database_logger = _component_logger("database")
request_logger = _component_logger("request", "requests")
auth_logger = _component_logger("auth")
share_logger = _component_logger("share")
snippet_logger = _component_logger("snippet")
brevo_logger = _component_logger("brevo")
email_manager_logger = _component_logger("email_manager")
execution_logger = _component_logger("execution")
scheduler_logger = _component_logger("scheduler")
utils_logger = _component_logger("utils")

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "app_logger",
    "database_logger",
    "request_logger",
    "auth_logger",
    "share_logger",
    "snippet_logger",
    "brevo_logger",
    "email_manager_logger",
    "execution_logger",
    "scheduler_logger",
    "utils_logger",
]
