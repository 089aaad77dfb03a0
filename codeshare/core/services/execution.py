"""
Client for the remote code execution sandbox.

The sandbox is a separate service. This module only forwards
``{language, code, input}`` and relays ``{output, error}``.
"""

from typing import Any

import httpx

from codeshare.core.config import execution_logger, settings
from codeshare.core.enums import Language
from codeshare.core.exceptions.types import SandboxUnavailableException
from codeshare.core.services.base import SingletonService


__all__ = ["ExecutionService"]


class ExecutionService(SingletonService):
    _base_url: str = settings.SANDBOX_URL
    _timeout: float = settings.SANDBOX_TIMEOUT_SECONDS
    _client: httpx.AsyncClient | None = None

    @classmethod
    def _init_client(cls) -> None:
        if cls._client is None:
            cls._client = httpx.AsyncClient(
                base_url=cls._base_url,
                timeout=httpx.Timeout(cls._timeout),
            )
            execution_logger.info("Sandbox HTTP client initialized")

    @classmethod
    async def init(
        cls, base_url: str | None = None, timeout: float | None = None
    ) -> None:
        if base_url is not None:
            cls._base_url = base_url
        if timeout is not None:
            cls._timeout = timeout
        await cls.aclose()
        cls._init_client()
        cls._initialized = True

    @classmethod
    async def aclose(cls) -> None:
        if cls._client is not None:
            try:
                await cls._client.aclose()
            finally:
                cls._client = None
                execution_logger.info("Sandbox HTTP client closed")

    @classmethod
    async def execute(
        cls, language: Language, code: str, input: str = ""
    ) -> dict[str, Any]:
        """
        Run code in the sandbox.

        Program failures (compile errors, runtime errors, timeouts inside the
        sandbox) come back in ``error`` with a 200. Only failing to talk to
        the sandbox raises.

        Returns:
            dict: ``{"output": str, "error": str | None}``.

        Raises:
            SandboxUnavailableException: On network errors, timeouts, non-2xx
                responses or a body that is not a JSON object.
        """
        if cls._client is None:
            cls._init_client()
        assert cls._client is not None

        payload = {"language": language.value, "code": code, "input": input}
        try:
            resp = await cls._client.post("/execute", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            execution_logger.error(f"Sandbox returned {status} for {language.value}")
            raise SandboxUnavailableException(
                details={"sandbox_status": status}
            ) from exc
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            execution_logger.error(f"Sandbox unreachable: {exc}")
            raise SandboxUnavailableException() from exc
        except ValueError as exc:
            execution_logger.error("Sandbox returned a non-JSON body")
            raise SandboxUnavailableException() from exc

        if not isinstance(body, dict):
            execution_logger.error("Sandbox returned an unexpected JSON shape")
            raise SandboxUnavailableException()

        execution_logger.info(
            f"Execution finished: language={language.value}, error={bool(body.get('error'))}"
        )
        return {"output": body.get("output") or "", "error": body.get("error") or None}
