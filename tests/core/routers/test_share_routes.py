"""
Integration tests for the share link endpoints.
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from freezegun import freeze_time
from httpx import AsyncClient

from codeshare.core.config import settings
from codeshare.core.utils import utc_now


class TestCreateShareEndpoint:
    """Tests for POST /share"""

    async def test_create_link(self, authenticated_client: AsyncClient, snippet):
        response = await authenticated_client.post(
            "/share", json={"codeId": str(snippet.id), "expirationMinutes": 30}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert "expiresAt" in data and "createdAt" in data

    async def test_requires_session(self, client: AsyncClient, snippet):
        response = await client.post(
            "/share", json={"codeId": str(snippet.id), "expirationMinutes": 30}
        )
        assert response.status_code == 401

    @pytest.mark.parametrize("minutes", [0, -5, settings.SHARE_MAX_TTL_MINUTES + 1])
    async def test_invalid_ttl(self, authenticated_client: AsyncClient, snippet, minutes):
        response = await authenticated_client.post(
            "/share", json={"codeId": str(snippet.id), "expirationMinutes": minutes}
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_ttl"

    async def test_not_owner(self, client: AsyncClient, snippet, other_account):
        login = await client.post(
            "/login", json={"email": other_account.email, "password": "SecurePass123"}
        )
        assert login.status_code == 200

        response = await client.post(
            "/share", json={"codeId": str(snippet.id), "expirationMinutes": 5}
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "authorization_error"

    async def test_unknown_snippet(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/share", json={"codeId": str(uuid4()), "expirationMinutes": 5}
        )
        assert response.status_code == 403


class TestResolveShareEndpoint:
    """Tests for GET /share/{token}"""

    async def test_link_expires(self, authenticated_client: AsyncClient, snippet):
        start = utc_now()

        with freeze_time(start):
            created = await authenticated_client.post(
                "/share", json={"codeId": str(snippet.id), "expirationMinutes": 1}
            )
        token = created.json()["token"]
        authenticated_client.cookies.clear()

        with freeze_time(start + timedelta(seconds=30)):
            live = await authenticated_client.get(f"/share/{token}")
        assert live.status_code == 200
        assert live.json()["code"] == snippet.code
        assert live.json()["language"] == "python"

        with freeze_time(start + timedelta(seconds=61)):
            expired = await authenticated_client.get(f"/share/{token}")
        assert expired.status_code == 404

    async def test_no_session_needed(self, authenticated_client: AsyncClient, snippet):
        created = await authenticated_client.post(
            "/share", json={"codeId": str(snippet.id), "expirationMinutes": 5}
        )
        token = created.json()["token"]
        authenticated_client.cookies.clear()

        response = await authenticated_client.get(f"/share/{token}")
        assert response.status_code == 200

    async def test_unknown_and_malformed_look_the_same(self, client: AsyncClient):
        unknown = await client.get(f"/share/{'a' * 32}")
        malformed = await client.get("/share/%21%21")

        assert unknown.status_code == malformed.status_code == 404
        assert unknown.json() == malformed.json()

    async def test_deleted_snippet_invalidates_links(
        self, authenticated_client: AsyncClient, snippet
    ):
        created = await authenticated_client.post(
            "/share", json={"codeId": str(snippet.id), "expirationMinutes": 5}
        )
        token = created.json()["token"]

        deleted = await authenticated_client.delete(f"/code/{snippet.id}")
        assert deleted.status_code == 200

        assert (await authenticated_client.get(f"/share/{token}")).status_code == 404
