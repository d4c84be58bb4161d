"""Tests for UAATokenClient client-credentials grant and AccessToken expiry."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import httpx
import pytest

from ignition.infra.uaa import AccessToken, TokenExchangeError, UAATokenClient

TOKEN_URL = "https://uaa.example.com/oauth/token"


@pytest.mark.unit
class TestAccessToken:
    def test_without_expiry_never_expires(self) -> None:
        assert AccessToken(value="t").is_expired() is False

    def test_past_expiry_is_expired(self) -> None:
        now = datetime(2024, 1, 1, tzinfo=UTC)
        token = AccessToken(value="t", expiry=now - timedelta(seconds=1))
        assert token.is_expired(now) is True

    def test_future_expiry_is_not_expired(self) -> None:
        now = datetime(2024, 1, 1, tzinfo=UTC)
        token = AccessToken(value="t", expiry=now + timedelta(hours=1))
        assert token.is_expired(now) is False

    def test_expires_slightly_early(self) -> None:
        now = datetime(2024, 1, 1, tzinfo=UTC)
        token = AccessToken(value="t", expiry=now + timedelta(seconds=5))
        assert token.is_expired(now) is True


@pytest.mark.unit
class TestUAATokenClient:
    @pytest.mark.asyncio
    async def test_client_credentials_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"access_token": "at_123", "token_type": "bearer", "expires_in": 600},
            )

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = UAATokenClient(TOKEN_URL, "cid", "csec", client=http_client)

        before = datetime.now(UTC)
        token = await client.client_credentials()

        assert token.value == "at_123"
        assert token.token_type == "bearer"
        assert token.expiry is not None
        assert before + timedelta(seconds=590) < token.expiry
        assert b"grant_type=client_credentials" in seen[0].content
        assert seen[0].headers["Authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_rejected_client_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401,
                json={"error": "unauthorized", "error_description": "Bad credentials"},
            )

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = UAATokenClient(TOKEN_URL, "cid", "bad", client=http_client)

        with pytest.raises(TokenExchangeError) as exc_info:
            await client.client_credentials()

        assert exc_info.value.status_code == 401
        assert exc_info.value.error == "unauthorized"

    @pytest.mark.asyncio
    async def test_connection_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = UAATokenClient(TOKEN_URL, "cid", "csec", client=http_client)

        with pytest.raises(TokenExchangeError) as exc_info:
            await client.client_credentials()

        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>bad gateway</html>")

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = UAATokenClient(TOKEN_URL, "cid", "csec", client=http_client)

        with pytest.raises(TokenExchangeError) as exc_info:
            await client.client_credentials()

        assert exc_info.value.status_code == 502
        assert exc_info.value.error == "unknown"

    @pytest.mark.asyncio
    async def test_missing_access_token_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"token_type": "bearer"})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = UAATokenClient(TOKEN_URL, "cid", "csec", client=http_client)

        with pytest.raises(TokenExchangeError) as exc_info:
            await client.client_credentials()

        assert exc_info.value.error == "invalid_response"

    @pytest.mark.asyncio
    async def test_scopes_and_default_validity(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"access_token": "at", "token_type": "Bearer", "scope": "scim.read scim.write"},
            )

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = UAATokenClient(TOKEN_URL, "cid", "csec", client=http_client)

        before = datetime.now(UTC)
        token = await client.client_credentials()

        assert token.scopes == frozenset({"scim.read", "scim.write"})
        assert token.token_type == "bearer"
        assert token.expiry is not None
        assert token.expiry > before + timedelta(hours=11)
