"""
Integration tests for POST /execute.
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from codeshare.core.enums import Language
from codeshare.core.exceptions.types import SandboxUnavailableException
from codeshare.core.services import ExecutionService


@pytest.fixture
def mock_execute():
    with patch.object(ExecutionService, "execute", new_callable=AsyncMock) as mock:
        yield mock


class TestExecuteEndpoint:

    async def test_relays_sandbox_result(self, client: AsyncClient, mock_execute):
        mock_execute.return_value = {"output": "42\n", "error": None}

        response = await client.post(
            "/execute",
            json={"language": "python", "code": "print(input())", "input": "42"},
        )

        assert response.status_code == 200
        assert response.json() == {"output": "42\n", "error": None}
        mock_execute.assert_awaited_once_with(
            language=Language.PYTHON, code="print(input())", input="42"
        )

    async def test_sandbox_down(self, client: AsyncClient, mock_execute):
        mock_execute.side_effect = SandboxUnavailableException()

        response = await client.post(
            "/execute", json={"language": "cpp", "code": "int main() {}"}
        )

        assert response.status_code == 503
        assert response.json()["kind"] == "sandbox_unavailable"

    async def test_unsupported_language(self, client: AsyncClient, mock_execute):
        response = await client.post(
            "/execute", json={"language": "brainfuck", "code": "+"}
        )

        assert response.status_code == 422
        mock_execute.assert_not_awaited()
