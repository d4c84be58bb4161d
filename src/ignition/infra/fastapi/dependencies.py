"""FastAPI dependencies wiring the provisioning flow for one request.

Every request builds its own token, clients, and services on top of the
app-scoped ``httpx.AsyncClient``; nothing is cached between requests.

The authenticating proxy in front of the app supplies the account through
the ``X-Account-Name`` header (and optionally ``X-User-Email``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Header, Request

from ignition.domain.identity import IdentityDirectory, UserProvisioningService, UserRecord
from ignition.domain.organization import OrganizationResolver, PlatformClient
from ignition.foundation.domain.exceptions import AuthenticationError, NotFoundError
from ignition.infra.cloudfoundry import CloudControllerClient
from ignition.infra.fastapi.settings import IgnitionSettings
from ignition.infra.uaa import AccessToken, TokenExchangeError, UAAClient, UAATokenClient

ACCOUNT_NAME_HEADER = "X-Account-Name"
USER_EMAIL_HEADER = "X-User-Email"


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated account extracted from the request."""

    account_name: str
    email: str | None = None


def get_settings(request: Request) -> IgnitionSettings:
    return request.app.state.ignition_settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_principal(
    x_account_name: Annotated[str | None, Header()] = None,
    x_user_email: Annotated[str | None, Header()] = None,
) -> Principal:
    """Extract the principal from proxy-supplied headers.

    Raises:
        NotFoundError: If no account name was supplied.
    """
    if not x_account_name:
        raise NotFoundError("Profile", ACCOUNT_NAME_HEADER, message="no profile in request")
    return Principal(account_name=x_account_name, email=x_user_email or None)


async def get_access_token(
    settings: Annotated[IgnitionSettings, Depends(get_settings)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> AccessToken:
    """Obtain a client-credentials token for platform and UAA calls.

    Raises:
        AuthenticationError: If the token endpoint rejects the client.
    """
    token_client = UAATokenClient(
        token_url=settings.uaa_token_url,
        client_id=settings.api_client_id,
        client_secret=settings.api_client_secret,
        timeout=settings.http_timeout,
        client=client,
    )
    try:
        return await token_client.client_credentials()
    except TokenExchangeError as exc:
        raise AuthenticationError(
            context={"status_code": exc.status_code, "error": exc.error},
        ) from exc


def get_identity_directory(
    settings: Annotated[IgnitionSettings, Depends(get_settings)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    token: Annotated[AccessToken, Depends(get_access_token)],
) -> IdentityDirectory:
    return UAAClient(settings.uaa_url, client=client, token=token)


def get_platform_client(
    settings: Annotated[IgnitionSettings, Depends(get_settings)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    token: Annotated[AccessToken, Depends(get_access_token)],
) -> PlatformClient:
    return CloudControllerClient(settings.api_url, client=client, token=token)


async def get_current_user(
    principal: Annotated[Principal, Depends(get_principal)],
    settings: Annotated[IgnitionSettings, Depends(get_settings)],
    directory: Annotated[IdentityDirectory, Depends(get_identity_directory)],
) -> UserRecord:
    """Ensure the principal has an IdP record and return it."""
    service = UserProvisioningService(directory, origin=settings.uaa_origin)
    return await service.ensure_user(principal.account_name, email=principal.email)


def get_organization_resolver(
    platform: Annotated[PlatformClient, Depends(get_platform_client)],
) -> OrganizationResolver:
    return OrganizationResolver(platform)
