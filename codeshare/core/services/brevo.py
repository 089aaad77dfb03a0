"""
Brevo transactional email client.

Only ``POST /smtp/email`` is used. Server errors, rate limiting and network
failures are retried with capped exponential backoff; any other client
error fails on the first response.

Example usage:
    await BrevoService.init(api_key="...", sender_email="no-reply@example.com")
    await BrevoService.send_transactional_email(
        subject="Hello",
        to=ListContact(to=[Contact(email="user@example.com")]),
        textContent="Hi there",
    )
"""

import asyncio
import random
from typing import Any

from fastapi import status as http_status
import httpx
from pydantic import BaseModel

from codeshare.core.config import brevo_logger, settings
from codeshare.core.exceptions.types import AppException
from codeshare.core.services.base import SingletonService


class Contact(BaseModel):
    email: str
    name: str | None = None


class ListContact(BaseModel):
    to: list[Contact]


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class BrevoService(SingletonService):
    _base_url: str = settings.BREVO_BASE_URL
    _api_key: str = settings.BREVO_API_KEY
    _sender_email: str = settings.BREVO_SENDER_EMAIL
    _sender_name: str = settings.BREVO_SENDER_NAME
    _client: httpx.AsyncClient | None = None

    _BACKOFF_BASE: float = 3.0
    _BACKOFF_MAX: float = 60.0
    _JITTER: float = 0.2

    @classmethod
    def _init_client(cls) -> None:
        if cls._client is not None:
            return
        cls._client = httpx.AsyncClient(
            base_url=cls._base_url, timeout=httpx.Timeout(30.0)
        )
        brevo_logger.info("Brevo client opened")

    @classmethod
    async def aclose(cls) -> None:
        if cls._client is None:
            return
        try:
            await cls._client.aclose()
        finally:
            cls._client = None
            brevo_logger.info("Brevo client closed")

    @classmethod
    async def init(
        cls,
        api_key: str | None = None,
        sender_email: str | None = None,
        sender_name: str | None = None,
    ) -> None:
        """
        (Re)configure the client. Arguments left as None keep their value.
        """
        cls._api_key = api_key if api_key is not None else cls._api_key
        cls._sender_email = (
            sender_email if sender_email is not None else cls._sender_email
        )
        cls._sender_name = sender_name if sender_name is not None else cls._sender_name
        await cls.aclose()
        cls._init_client()
        cls._initialized = True

    @classmethod
    def _compute_backoff(
        cls, attempt: int, err_headers: httpx.Headers | None = None
    ) -> float:
        """
        Seconds to wait before retry ``attempt`` (1-based).

        Brevo's ``x-sib-ratelimit-reset`` header is honoured when it parses;
        otherwise ``_BACKOFF_BASE * 2**(attempt-1)``, capped at ``_BACKOFF_MAX``,
        with +/-``_JITTER`` random spread.
        """
        reset = err_headers.get("x-sib-ratelimit-reset") if err_headers else None
        if reset is not None:
            try:
                return float(reset)
            except ValueError:
                pass
        delay = min(cls._BACKOFF_BASE * 2 ** (attempt - 1), cls._BACKOFF_MAX)
        return delay * random.uniform(1 - cls._JITTER, 1 + cls._JITTER)

    @classmethod
    def _auth_headers(cls, extra: dict[str, str] | None = None) -> dict[str, str]:
        return {
            "api-key": cls._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
            **(extra or {}),
        }

    @classmethod
    async def _request(
        cls,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        max_attempts: int = 3,
    ) -> dict[str, Any] | str:
        """
        Send one API call, retrying transient failures.

        Returns:
            The JSON body, or the raw text when it is not JSON.

        Raises:
            AppException: With Brevo's status for a non-retryable 4xx or once
                5xx/429 retries run out, and 503 when the network keeps failing.
        """
        if cls._client is None:
            cls._init_client()
        assert cls._client is not None

        for attempt in range(1, max_attempts + 1):
            last_try = attempt == max_attempts
            try:
                response = await cls._client.request(
                    method, endpoint, headers=cls._auth_headers(headers), json=json
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                code = exc.response.status_code
                detail = _body(exc.response)
                retryable = code == 429 or code >= 500
                if not retryable:
                    brevo_logger.error(f"Brevo rejected {method} {endpoint}: {code} {detail}")
                    raise AppException(
                        message=f"Brevo request failed with {code}: {detail}",
                        status_code=code,
                    ) from exc
                if last_try:
                    brevo_logger.error(f"Brevo still failing after {attempt} attempts: {code} {detail}")
                    raise AppException(
                        message=f"Brevo error after retries: {code}", status_code=code
                    ) from exc
                wait = cls._compute_backoff(
                    attempt, exc.response.headers if code == 429 else None
                )
                brevo_logger.warning(
                    f"Brevo returned {code} (attempt {attempt}/{max_attempts}), retrying in {wait:.1f}s"
                )
            except httpx.TransportError as exc:
                if last_try:
                    brevo_logger.error(f"Brevo unreachable after {attempt} attempts: {exc}")
                    raise AppException(
                        message="Brevo network error after retries",
                        status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
                    ) from exc
                wait = cls._compute_backoff(attempt)
                brevo_logger.warning(
                    f"Brevo network error (attempt {attempt}/{max_attempts}), retrying in {wait:.1f}s: {exc}"
                )
            else:
                return _body(response)

            await asyncio.sleep(wait)

        raise AppException(
            message="Brevo request made no attempts",
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @classmethod
    async def send_transactional_email(
        cls,
        subject: str,
        to: ListContact,
        sender: Contact | None = None,
        textContent: str | None = None,
        htmlContent: str | None = None,
    ) -> dict[str, Any] | str:
        """
        Send one email to the recipients in ``to``.

        Raises:
            ValueError: If neither ``textContent`` nor ``htmlContent`` is given.
        """
        if not (htmlContent or textContent):
            raise ValueError("Either htmlContent or textContent must be provided")

        sender = sender or Contact(email=cls._sender_email, name=cls._sender_name)
        payload: dict[str, Any] = {
            "sender": sender.model_dump(exclude_none=True),
            "subject": subject,
            **to.model_dump(exclude_none=True),
        }
        if textContent:
            payload["textContent"] = textContent
        if htmlContent:
            payload["htmlContent"] = htmlContent

        return await cls._request("POST", "/smtp/email", json=payload)


__all__ = ["BrevoService", "Contact", "ListContact"]
