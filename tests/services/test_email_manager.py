"""
Test suite for EmailManagerService.

- Template rendering and delivery through Brevo
- Delivery failures reported as False

Run tests:
    pytest tests/services/test_email_manager.py -v
"""

from unittest.mock import AsyncMock, patch

import pytest
from jinja2 import TemplateNotFound

from codeshare.core.config import settings
from codeshare.core.exceptions.types import AppException
from codeshare.core.services import BrevoService, EmailManagerService, Renderer


@pytest.fixture(autouse=True)
def mock_email_service():
    """Use the real send_otp_email in this module."""
    yield None


@pytest.fixture
def mock_brevo():
    with patch.object(
        BrevoService,
        "send_transactional_email",
        new_callable=AsyncMock,
        return_value={"messageId": "m-1"},
    ) as mock_send:
        yield mock_send


@pytest.fixture(autouse=True)
def renderer():
    Renderer.initialize()
    yield
    Renderer._env = None


class TestInit:

    def test_init_marks_initialized(self):
        EmailManagerService._reset()
        EmailManagerService.init()
        assert EmailManagerService.is_initialized() is True


class TestSendOtpEmail:

    async def test_renders_code_into_both_parts(self, mock_brevo):
        assert await EmailManagerService.send_otp_email("dev@example.com", "482913")

        kwargs = mock_brevo.await_args.kwargs
        assert kwargs["to"].to[0].email == "dev@example.com"
        assert settings.APP_NAME in kwargs["subject"]
        assert "482913" in kwargs["htmlContent"]
        assert "482913" in kwargs["textContent"]
        assert f"{settings.OTP_EXPIRY_MINUTES} minutes" in kwargs["textContent"]

    async def test_brevo_failure_returns_false(self, mock_brevo):
        mock_brevo.side_effect = AppException("Brevo down", status_code=503)

        assert await EmailManagerService.send_otp_email("dev@example.com", "1") is False


class TestSendEmail:

    async def test_missing_template_returns_false(self, mock_brevo):
        with patch.object(
            Renderer,
            "render_template",
            new_callable=AsyncMock,
            side_effect=TemplateNotFound("nope.html"),
        ):
            sent = await EmailManagerService.send_email(
                email="dev@example.com",
                subject="Subject",
                html_template="nope.html",
                context={},
            )

        assert sent is False
        mock_brevo.assert_not_awaited()

    async def test_uninitialized_renderer_returns_false(self, mock_brevo):
        Renderer._env = None

        sent = await EmailManagerService.send_email(
            email="dev@example.com",
            subject="Subject",
            html_template="otp_email.html",
            context={},
        )

        assert sent is False
