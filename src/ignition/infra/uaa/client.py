"""Async client for the UAA SCIM user directory.

Implements :class:`ignition.domain.identity.ports.IdentityDirectory` over
``/Users``. Every call requires an http client and an unexpired access
token; the client never obtains or refreshes tokens itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from ignition.foundation.domain.exceptions import (
    AmbiguousMatchError,
    AuthenticationError,
    NotFoundError,
    RemoteCreationError,
    RemoteLookupError,
    ValidationError,
)

if TYPE_CHECKING:
    from ignition.infra.uaa.token_client import AccessToken

logger = logging.getLogger(__name__)

_SCIM_CONTENT_TYPE = "application/json"


def _user_resources(body: Any, account_name: str) -> list[dict[str, Any]]:
    """Return the ``resources`` list of a SCIM query response, or fail."""
    resources = (body.get("resources") or []) if isinstance(body, dict) else None
    if not isinstance(resources, list) or not all(isinstance(r, dict) for r in resources):
        raise RemoteLookupError("uaa: unexpected user query response", account_name=account_name)
    return resources


class UAAClient:
    """UAA user directory client.

    Args:
        base_url: UAA base URL (e.g., "https://uaa.sys.example.com").
        client: httpx.AsyncClient used for requests. Caller owns its lifecycle.
        token: Access token carrying the ``scim.read``/``scim.write`` scopes.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        token: AccessToken | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._token = token

    async def find_user_id(self, account_name: str) -> str:
        """Find the UAA user id for an account name.

        Args:
            account_name: The ``userName`` to search for.

        Returns:
            The user's UAA identifier.

        Raises:
            ValidationError: If ``account_name`` is empty (no request is made).
            AuthenticationError: If there is no client or usable token.
            RemoteLookupError: On transport failure, non-2xx status, or unreadable body.
            NotFoundError: If no user has that account name.
            AmbiguousMatchError: If more than one user has that account name.
        """
        if not account_name:
            raise ValidationError(
                "account_name",
                "cannot search for a user with an empty account name",
            )

        client, headers = self._authenticated()
        # SCIM filter values are JSON strings
        escaped = account_name.replace("\\", "\\\\").replace('"', '\\"')
        try:
            response = await client.get(
                f"{self._base_url}/Users",
                params={"filter": f'userName eq "{escaped}"', "attributes": "id,userName"},
                headers=headers,
            )
            response.raise_for_status()
            body: Any = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "uaa_user_query_failed",
                extra={"status": exc.response.status_code},
            )
            raise RemoteLookupError(
                "uaa: user query failed",
                status_code=exc.response.status_code,
                account_name=account_name,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("uaa_user_query_error", extra={"error": str(exc)})
            raise RemoteLookupError(
                "uaa: user query failed",
                account_name=account_name,
            ) from exc

        resources = [r for r in _user_resources(body, account_name) if r.get("id")]
        if not resources:
            raise NotFoundError(
                "User",
                account_name,
                message=f"cannot find user with account name: [{account_name}]",
            )
        if len(resources) > 1:
            raise AmbiguousMatchError("User", account_name, len(resources))
        return str(resources[0]["id"])

    async def create_user(
        self,
        username: str,
        origin: str,
        external_id: str,
        email: str,
    ) -> str:
        """Create a user managed by an external identity provider.

        No existence check is made first; the directory decides whether a
        duplicate is allowed.

        Args:
            username: ``userName`` for the new user.
            origin: Identity zone origin marking who manages the account.
            external_id: Identifier of the user in the external provider.
            email: Primary email address.

        Returns:
            The new user's UAA identifier.

        Raises:
            AuthenticationError: If there is no client or usable token.
            RemoteCreationError: On transport failure, non-2xx status, or a body without an id.
        """
        client, headers = self._authenticated()
        payload = {
            "userName": username,
            "origin": origin,
            "externalId": external_id,
            "emails": [{"value": email, "primary": True}],
        }
        try:
            response = await client.post(
                f"{self._base_url}/Users",
                json=payload,
                headers={**headers, "Content-Type": _SCIM_CONTENT_TYPE},
            )
            response.raise_for_status()
            body: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "uaa_user_create_failed",
                extra={"status": exc.response.status_code},
            )
            raise RemoteCreationError(
                "uaa: cannot create user",
                status_code=exc.response.status_code,
                username=username,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("uaa_user_create_error", extra={"error": str(exc)})
            raise RemoteCreationError("uaa: cannot create user", username=username) from exc

        user_id = body.get("id") if isinstance(body, dict) else None
        if not user_id:
            raise RemoteCreationError("uaa: created user has no id", username=username)
        return str(user_id)

    def _authenticated(self) -> tuple[httpx.AsyncClient, dict[str, str]]:
        """Return the client and bearer headers, or fail before any I/O."""
        if self._client is None or self._token is None or not self._token.value:
            raise AuthenticationError()
        if self._token.is_expired():
            raise AuthenticationError(context={"reason": "token_expired"})
        headers = {
            "Authorization": f"Bearer {self._token.value}",
            "Accept": "application/json",
        }
        return self._client, headers
