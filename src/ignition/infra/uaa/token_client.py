"""Client-credentials tokens from UAA.

Ignition authenticates to UAA (SCIM) and the Cloud Controller as its own
OAuth client. One token is fetched per provisioning request and handed to
both adapters, which treat it as read-only and never refresh it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# UAA's default access token validity, used when the response omits expires_in
_DEFAULT_VALIDITY = timedelta(hours=12)
# Tokens this close to expiry already count as expired
_EXPIRY_LEEWAY = timedelta(seconds=30)


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer token plus what UAA said about it.

    ``expiry`` is None only for hand-built tokens (tests, static config);
    tokens from :class:`UAATokenClient` always carry one.
    """

    value: str
    expiry: datetime | None = None
    token_type: str = "bearer"
    scopes: frozenset[str] = field(default_factory=frozenset)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry is None:
            return False
        return (now or datetime.now(UTC)) >= self.expiry - _EXPIRY_LEEWAY


class TokenExchangeError(Exception):
    """UAA refused or could not be asked for a token.

    Attributes:
        status_code: HTTP status from UAA, 0 when no response was received.
        error: OAuth 2.0 error code (e.g. "unauthorized", "invalid_client").
        error_description: UAA's explanation, if any.
    """

    def __init__(self, status_code: int, error: str, error_description: str = "") -> None:
        self.status_code = status_code
        self.error = error
        self.error_description = error_description
        super().__init__(f"uaa token request failed: {error} ({status_code})")


def _oauth_error(response: httpx.Response) -> tuple[str, str]:
    try:
        body = response.json()
    except ValueError:
        return "unknown", response.reason_phrase
    if not isinstance(body, dict):
        return "unknown", response.reason_phrase
    return str(body.get("error", "unknown")), str(body.get("error_description", ""))


def _token_from_body(body: Any) -> AccessToken:
    if not isinstance(body, dict) or not body.get("access_token"):
        raise TokenExchangeError(200, "invalid_response", "no access_token in response")
    expires_in = body.get("expires_in")
    try:
        validity = timedelta(seconds=int(expires_in)) if expires_in is not None else _DEFAULT_VALIDITY
    except (TypeError, ValueError) as exc:
        raise TokenExchangeError(200, "invalid_response", "unreadable expires_in") from exc
    return AccessToken(
        value=str(body["access_token"]),
        expiry=datetime.now(UTC) + validity,
        token_type=str(body.get("token_type", "bearer")).lower(),
        scopes=frozenset(str(body.get("scope", "")).split()),
    )


class UAATokenClient:
    """Fetch tokens from ``/oauth/token`` with the client-credentials grant.

    Args:
        token_url: Token endpoint, usually ``{uaa_url}/oauth/token``.
        client_id: Ignition's UAA client.
        client_secret: Secret for ``client_id``; sent as HTTP basic auth.
        client: Shared httpx.AsyncClient owned by the application.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        client: httpx.AsyncClient,
        timeout: float = 10.0,
    ) -> None:
        self._token_url = token_url
        self._auth = (client_id, client_secret)
        self._client = client
        self._timeout = timeout

    async def client_credentials(self) -> AccessToken:
        """Request a new token.

        Raises:
            TokenExchangeError: On a non-2xx answer, a transport failure, or a
                body without an ``access_token``.
        """
        try:
            response = await self._client.post(
                self._token_url,
                data={"grant_type": "client_credentials", "response_type": "token"},
                auth=self._auth,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            logger.error("uaa_token_connection_error", extra={"error": str(exc)})
            raise TokenExchangeError(0, "connection_error", str(exc)) from exc

        if response.is_error:
            error, description = _oauth_error(response)
            logger.error(
                "uaa_token_request_failed",
                extra={"status": response.status_code, "oauth_error": error},
            )
            raise TokenExchangeError(response.status_code, error, description)

        try:
            body = response.json()
        except ValueError as exc:
            raise TokenExchangeError(
                response.status_code, "invalid_response", "token response is not JSON"
            ) from exc
        return _token_from_body(body)
