"""Ignition Infra Cloud Foundry -- Cloud Controller organization client."""

from ignition.infra.cloudfoundry.client import CloudControllerClient, user_scope_query

__all__ = [
    "CloudControllerClient",
    "user_scope_query",
]
