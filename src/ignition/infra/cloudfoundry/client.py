"""Async Cloud Controller (v2) client for organizations.

Implements :class:`ignition.domain.organization.ports.PlatformClient`.
List calls follow ``next_url`` until the last page so callers always get the
complete result set.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from ignition.domain.organization.organization import Organization
from ignition.foundation.domain.exceptions import (
    AuthenticationError,
    RemoteCreationError,
    RemoteLookupError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ignition.infra.uaa.token_client import AccessToken

logger = logging.getLogger(__name__)

_ORGANIZATIONS_PATH = "/v2/organizations"


def user_scope_query(user_id: str) -> dict[str, str]:
    """Build the list query for organizations the user is a member of."""
    return {"q": f"user_guid:{user_id}"}


def _organization_from_resource(resource: Mapping[str, Any]) -> Organization:
    metadata = resource.get("metadata") or {}
    entity = resource.get("entity") or {}
    return Organization(
        guid=str(metadata["guid"]),
        name=str(entity.get("name", "")),
        quota_definition_guid=str(entity.get("quota_definition_guid") or ""),
        default_isolation_segment_guid=str(entity.get("default_isolation_segment_guid") or ""),
        created_at=str(metadata.get("created_at") or ""),
        updated_at=str(metadata.get("updated_at") or ""),
    )


class CloudControllerClient:
    """Organization operations against the Cloud Controller v2 API.

    Args:
        api_url: Cloud Controller URL (e.g., "https://api.sys.example.com").
        client: httpx.AsyncClient used for requests. Caller owns its lifecycle.
        token: Access token with Cloud Controller admin scope.
    """

    def __init__(
        self,
        api_url: str,
        client: httpx.AsyncClient | None = None,
        token: AccessToken | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._client = client
        self._token = token

    async def list_organizations(self, query: Mapping[str, str]) -> list[Organization]:
        """List every organization matching ``query`` across all result pages.

        Raises:
            AuthenticationError: If there is no client or usable token.
            RemoteLookupError: On transport failure, non-2xx status, or unreadable body.
        """
        client, headers = self._authenticated()
        orgs: list[Organization] = []
        url = f"{self._api_url}{_ORGANIZATIONS_PATH}"
        params: Mapping[str, str] | None = query
        while url:
            try:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
                body: dict[str, Any] = response.json()
                orgs.extend(_organization_from_resource(r) for r in body.get("resources") or [])
            except httpx.HTTPStatusError as exc:
                raise RemoteLookupError(
                    "cloud controller: cannot list organizations",
                    status_code=exc.response.status_code,
                ) from exc
            except (httpx.HTTPError, ValueError, KeyError, AttributeError) as exc:
                raise RemoteLookupError("cloud controller: cannot list organizations") from exc

            next_url = body.get("next_url")
            # next_url already carries the query string
            url = f"{self._api_url}{next_url}" if next_url else ""
            params = None

        logger.debug("organizations_listed", extra={"count": len(orgs)})
        return orgs

    async def create_organization(
        self,
        name: str,
        quota_definition_guid: str,
        isolation_segment_guid: str,
    ) -> Organization:
        """Create an organization.

        Raises:
            AuthenticationError: If there is no client or usable token.
            RemoteCreationError: On transport failure, non-2xx status, or unreadable body.
        """
        client, headers = self._authenticated()
        payload: dict[str, str] = {"name": name}
        if quota_definition_guid:
            payload["quota_definition_guid"] = quota_definition_guid
        if isolation_segment_guid:
            payload["default_isolation_segment_guid"] = isolation_segment_guid
        try:
            response = await client.post(
                f"{self._api_url}{_ORGANIZATIONS_PATH}",
                json=payload,
                headers=headers,
            )
            response.raise_for_status()
            return _organization_from_resource(response.json())
        except httpx.HTTPStatusError as exc:
            raise RemoteCreationError(
                f"cloud controller: cannot create organization: {name}",
                status_code=exc.response.status_code,
                org_name=name,
            ) from exc
        except (httpx.HTTPError, ValueError, KeyError, AttributeError) as exc:
            raise RemoteCreationError(
                f"cloud controller: cannot create organization: {name}",
                org_name=name,
            ) from exc

    def _authenticated(self) -> tuple[httpx.AsyncClient, dict[str, str]]:
        if self._client is None or self._token is None or not self._token.value:
            raise AuthenticationError("cloud controller: cannot authenticate")
        if self._token.is_expired():
            raise AuthenticationError(
                "cloud controller: cannot authenticate",
                context={"reason": "token_expired"},
            )
        headers = {
            "Authorization": f"Bearer {self._token.value}",
            "Accept": "application/json",
        }
        return self._client, headers
