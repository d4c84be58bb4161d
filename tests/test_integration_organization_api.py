"""Integration tests for GET /api/v1/organization through the full app stack."""

from __future__ import annotations

import base64
import json
from collections.abc import Iterator
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ignition.domain.organization import Organization
from ignition.foundation.domain.exceptions import RemoteLookupError
from ignition.infra.fastapi import AppSettings, IgnitionSettings, create_app
from ignition.infra.fastapi.dependencies import get_identity_directory, get_platform_client
from ignition.infra.fastapi.error_handlers import NOT_FOUND_DETAIL
from ignition.infra.fastapi.middleware import VCAP_REQUEST_ID_HEADER, propagate_request_id

_API_URL = "https://api.example.com"
_UAA_URL = "https://uaa.example.com"


def _ignition_settings() -> IgnitionSettings:
    return IgnitionSettings(  # type: ignore[call-arg]
        _env_file=None,
        org_prefix="ignition",
        quota_id="quota-guid",
        iso_segment_id="segment-guid",
        api_url=_API_URL,
        uaa_url=_UAA_URL,
        uaa_origin="okta",
        api_client_id="ignition-api",
        api_client_secret="api-secret",
        client_id="login-ui",
        client_secret="login-secret",
        auth_variant="openid",
    )


def _app_settings() -> AppSettings:
    return AppSettings(docs_url=None, openapi_url=None)


@pytest.fixture()
def app(platform: Any, directory: Any) -> Iterator[FastAPI]:
    application = create_app(_app_settings(), _ignition_settings())
    application.dependency_overrides[get_identity_directory] = lambda: directory
    application.dependency_overrides[get_platform_client] = lambda: platform
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.integration
class TestOrganizationEndpoint:
    def test_missing_profile_is_404(self, client: TestClient, platform: Any) -> None:
        resp = client.get("/api/v1/organization")

        assert resp.status_code == 404
        assert resp.json()["detail"] == NOT_FOUND_DETAIL
        assert platform.list_calls == []

    def test_new_user_gets_created_user_and_org(
        self,
        client: TestClient,
        platform: Any,
        directory: Any,
    ) -> None:
        resp = client.get(
            "/api/v1/organization",
            headers={"X-Account-Name": "Test.User@Example.com", "X-User-Email": "tu@example.com"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["guid"] == "created-org-guid"
        assert body["name"] == "ignition-test.user"
        assert body["quota_definition_guid"] == "quota-guid"
        assert body["default_isolation_segment_guid"] == "segment-guid"
        assert directory.create_calls == [
            {
                "username": "Test.User@Example.com",
                "origin": "okta",
                "external_id": "Test.User@Example.com",
                "email": "tu@example.com",
            }
        ]
        assert platform.list_calls == [{"q": "user_guid:uaa-Test.User@Example.com"}]

    def test_existing_org_is_returned_without_create(
        self,
        client: TestClient,
        platform: Any,
        directory: Any,
    ) -> None:
        directory.users["corp\\jsmith"] = "user-1"
        platform.orgs = [
            Organization(guid="other", name="shared", quota_definition_guid="quota-guid"),
            Organization(guid="mine", name="ignition-jsmith"),
        ]

        resp = client.get("/api/v1/organization", headers={"X-Account-Name": "corp\\jsmith"})

        assert resp.status_code == 200
        assert resp.json()["guid"] == "mine"
        assert platform.create_calls == []
        assert directory.create_calls == []

    def test_lookup_failure_is_generic_404(self, client: TestClient, platform: Any) -> None:
        platform.list_error = RuntimeError("cloud controller exploded: password=hunter2")

        resp = client.get("/api/v1/organization", headers={"X-Account-Name": "someone"})

        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert "hunter2" not in resp.text
        assert platform.create_calls == []

    def test_directory_failure_is_generic_404(self, client: TestClient, directory: Any) -> None:
        directory.find_error = RemoteLookupError("uaa: user query failed", status_code=500)

        resp = client.get("/api/v1/organization", headers={"X-Account-Name": "someone"})

        assert resp.status_code == 404
        assert resp.json()["error_code"] == "RESOURCE_NOT_FOUND"

    def test_request_id_is_echoed(self, client: TestClient) -> None:
        request_id = "550e8400-e29b-41d4-a716-446655440000"
        resp = client.get("/api/v1/organization", headers={"X-Request-ID": request_id})

        assert resp.headers["X-Request-ID"] == request_id
        assert resp.json()["correlation_id"] == request_id


@pytest.mark.integration
class TestHealthEndpoint:
    def test_healthz(self, client: TestClient) -> None:
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


@pytest.mark.integration
class TestAppFactory:
    def test_cors_disabled_by_default(self, client: TestClient) -> None:
        resp = client.get("/healthz", headers={"Origin": "https://evil.example.com"})
        assert "access-control-allow-origin" not in resp.headers

    def test_cors_allows_configured_origin(self) -> None:
        settings = AppSettings(docs_url=None, openapi_url=None, cors_origins="https://ui.example.com")
        app = create_app(settings, _ignition_settings())
        with TestClient(app) as client:
            resp = client.options(
                "/api/v1/organization",
                headers={
                    "Origin": "https://ui.example.com",
                    "Access-Control-Request-Method": "GET",
                },
            )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://ui.example.com"
        assert "X-Request-ID" in resp.headers


class _PlatformStub:
    """MockTransport handler standing in for UAA and the Cloud Controller."""

    def __init__(self, existing_user: bool) -> None:
        self.existing_user = existing_user
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url.startswith(f"{_UAA_URL}/oauth/token"):
            return httpx.Response(
                200,
                json={"access_token": "api-token", "token_type": "bearer", "expires_in": 600},
            )
        if url.startswith(f"{_UAA_URL}/Users") and request.method == "GET":
            resources = [{"id": "user-42", "userName": "jsmith"}] if self.existing_user else []
            return httpx.Response(200, json={"resources": resources, "totalResults": len(resources)})
        if url.startswith(f"{_UAA_URL}/Users") and request.method == "POST":
            return httpx.Response(201, json={"id": "user-new", "userName": "jsmith"})
        if url.startswith(f"{_API_URL}/v2/organizations") and request.method == "GET":
            return httpx.Response(200, json={"resources": [], "next_url": None})
        if url.startswith(f"{_API_URL}/v2/organizations") and request.method == "POST":
            payload = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "metadata": {"guid": "org-new", "created_at": "2026-01-01T00:00:00Z"},
                    "entity": {
                        "name": payload["name"],
                        "quota_definition_guid": payload.get("quota_definition_guid"),
                        "default_isolation_segment_guid": payload.get(
                            "default_isolation_segment_guid"
                        ),
                    },
                },
            )
        return httpx.Response(500)


@pytest.mark.integration
class TestOrganizationEndpointOverHttp:
    """Exercises the real token, UAA, and Cloud Controller clients."""

    def _get(
        self,
        stub: _PlatformStub,
        account_name: str = "jsmith@corp.io",
        **headers: str,
    ) -> httpx.Response:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(stub),
            event_hooks={"request": [propagate_request_id]},
        )
        app = create_app(_app_settings(), _ignition_settings(), http_client=http_client)
        with TestClient(app) as client:
            return client.get(
                "/api/v1/organization",
                headers={"X-Account-Name": account_name, **headers},
            )

    def test_existing_user_gets_new_org(self) -> None:
        stub = _PlatformStub(existing_user=True)

        resp = self._get(stub)

        assert resp.status_code == 200
        assert resp.json()["guid"] == "org-new"
        assert resp.json()["name"] == "ignition-jsmith"
        list_request = next(
            r for r in stub.requests if r.method == "GET" and r.url.path == "/v2/organizations"
        )
        assert list_request.url.params["q"] == "user_guid:user-42"
        assert list_request.headers["Authorization"] == "Bearer api-token"
        assert not any(r.method == "POST" and r.url.path == "/Users" for r in stub.requests)

    def test_unknown_user_is_created_in_uaa(self) -> None:
        stub = _PlatformStub(existing_user=False)

        resp = self._get(stub)

        assert resp.status_code == 200
        create = next(r for r in stub.requests if r.method == "POST" and r.url.path == "/Users")
        assert json.loads(create.content) == {
            "userName": "jsmith@corp.io",
            "origin": "okta",
            "externalId": "jsmith@corp.io",
            "emails": [{"value": "jsmith@corp.io", "primary": True}],
        }

    def test_request_id_forwarded_to_remote_calls(self) -> None:
        stub = _PlatformStub(existing_user=True)
        request_id = "550e8400-e29b-41d4-a716-446655440000"

        resp = self._get(stub, **{"X-Request-ID": request_id})

        assert resp.status_code == 200
        assert stub.requests
        assert all(r.headers[VCAP_REQUEST_ID_HEADER] == request_id for r in stub.requests)

    def test_token_requested_with_api_client_not_login_client(self) -> None:
        stub = _PlatformStub(existing_user=True)

        self._get(stub)

        token_request = next(r for r in stub.requests if r.url.path == "/oauth/token")
        expected = base64.b64encode(b"ignition-api:api-secret").decode()
        assert token_request.headers["Authorization"] == f"Basic {expected}"

    def test_domain_account_lookup_escapes_backslash(self) -> None:
        stub = _PlatformStub(existing_user=True)

        resp = self._get(stub, account_name="CORP\\jsmith")

        assert resp.status_code == 200
        assert resp.json()["name"] == "ignition-jsmith"
        lookup = next(r for r in stub.requests if r.method == "GET" and r.url.path == "/Users")
        assert lookup.url.params["filter"] == 'userName eq "CORP\\\\jsmith"'
