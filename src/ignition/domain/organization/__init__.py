"""Ignition Domain Organization -- name derivation and organization selection.

Resolves the organization a newly authenticated user should work in,
creating one on the platform when no suitable organization exists.
"""

from ignition.domain.organization.naming import organization_name
from ignition.domain.organization.organization import Organization, ProvisioningRequest
from ignition.domain.organization.ports import PlatformClient
from ignition.domain.organization.resolver import OrganizationResolver

__all__ = [
    "Organization",
    "OrganizationResolver",
    "PlatformClient",
    "ProvisioningRequest",
    "organization_name",
]
