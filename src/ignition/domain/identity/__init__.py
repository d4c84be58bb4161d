"""Ignition Domain Identity -- IdP user lookup and provisioning."""

from ignition.domain.identity.ports import IdentityDirectory
from ignition.domain.identity.provisioning import UserProvisioningService, UserRecord

__all__ = [
    "IdentityDirectory",
    "UserProvisioningService",
    "UserRecord",
]
