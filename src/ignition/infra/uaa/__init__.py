"""Ignition Infra UAA -- token endpoint and SCIM user directory clients."""

from ignition.infra.uaa.client import UAAClient
from ignition.infra.uaa.token_client import AccessToken, TokenExchangeError, UAATokenClient

__all__ = [
    "AccessToken",
    "TokenExchangeError",
    "UAAClient",
    "UAATokenClient",
]
