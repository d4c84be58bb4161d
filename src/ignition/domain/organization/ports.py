"""Port interface for the multi-tenant platform.

The resolver depends only on this protocol. The Cloud Controller adapter in
``ignition.infra.cloudfoundry`` implements it for production; tests supply
in-memory fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ignition.domain.organization.organization import Organization


@runtime_checkable
class PlatformClient(Protocol):
    """Capability set {list organizations, create organization}."""

    async def list_organizations(self, query: Mapping[str, str]) -> list[Organization]:
        """Return every organization matching ``query``, in platform order.

        Raises:
            Exception: Any failure; the resolver reports it as a lookup failure.
        """
        ...

    async def create_organization(
        self,
        name: str,
        quota_definition_guid: str,
        isolation_segment_guid: str,
    ) -> Organization:
        """Create an organization and return the platform's record of it.

        Raises:
            Exception: Any failure; the resolver reports it as a creation failure.
        """
        ...
