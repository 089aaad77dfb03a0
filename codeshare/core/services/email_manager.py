"""
Account emails: Jinja2 templates rendered by :class:`Renderer` and delivered
through :class:`BrevoService`.

Sending is best effort. A failure is logged and reported as False; it never
rolls back whatever state change asked for the email.
"""

from typing import Any

from jinja2 import TemplateError

from codeshare.core.config import email_manager_logger, settings
from codeshare.core.exceptions.types import AppException
from codeshare.core.services.base import SingletonService
from codeshare.core.services.brevo import BrevoService, Contact, ListContact
from codeshare.core.services.template import Renderer
from codeshare.core.utils import utc_now

# Everything that can go wrong between rendering and Brevo's response
_DELIVERY_ERRORS = (AppException, TemplateError, RuntimeError, ValueError)


class EmailManagerService(SingletonService):
    @classmethod
    def init(cls) -> None:
        """Needs BrevoService and Renderer to be initialized first."""
        cls._initialized = True
        email_manager_logger.info("Email manager ready")

    @classmethod
    async def send_email(
        cls,
        email: str,
        subject: str,
        html_template: str,
        context: dict[str, Any],
        text_template: str | None = None,
    ) -> bool:
        """
        Render ``html_template`` (and ``text_template`` if given) with
        ``context`` and mail the result to ``email``.

        Returns:
            bool: Whether Brevo accepted the message.
        """
        try:
            parts = {
                "htmlContent": await Renderer.render_template(html_template, context)
            }
            if text_template:
                parts["textContent"] = await Renderer.render_template(
                    text_template, context
                )
            await BrevoService.send_transactional_email(
                subject=subject, to=ListContact(to=[Contact(email=email)]), **parts
            )
        except _DELIVERY_ERRORS as e:
            email_manager_logger.error(f"'{subject}' to {email} not sent: {e}")
            return False

        email_manager_logger.info(f"'{subject}' sent to {email}")
        return True

    @classmethod
    async def send_otp_email(cls, email: str, otp_code: str) -> bool:
        """Mail a plaintext verification code together with its lifetime."""
        return await cls.send_email(
            email=email,
            subject=f"{settings.APP_NAME} verification code",
            html_template="otp_email.html",
            text_template="otp_email.txt",
            context={
                "app_name": settings.APP_NAME,
                "otp_code": otp_code,
                "expiry_minutes": settings.OTP_EXPIRY_MINUTES,
                "year": utc_now().year,
            },
        )


__all__ = ["EmailManagerService"]
