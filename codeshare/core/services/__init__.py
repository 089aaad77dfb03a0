from codeshare.core.services.auth import AuthService
from codeshare.core.services.base import SingletonService
from codeshare.core.services.brevo import BrevoService
from codeshare.core.services.email_manager import EmailManagerService
from codeshare.core.services.execution import ExecutionService
from codeshare.core.services.otp import OTPConfirmation, OTPService
from codeshare.core.services.session import IssuedSession, SessionService
from codeshare.core.services.share import ShareLinkGrant, SharedSnippet, ShareService
from codeshare.core.services.template import Renderer

__all__ = [
    # Core services
    "AuthService",
    "OTPService",
    "SessionService",
    "ShareService",
    "SingletonService",
    # Integrations
    "BrevoService",
    "EmailManagerService",
    "ExecutionService",
    "Renderer",
    # Results
    "IssuedSession",
    "OTPConfirmation",
    "ShareLinkGrant",
    "SharedSnippet",
]
