"""Organization selection and creation for an authenticated account.

Selection priority over the organizations the platform returns:

1. Name match: an organization already named ``{prefix}-{localpart}``.
   Wins regardless of its quota.
2. Quota match: the first organization (platform order) carrying the
   requested quota definition.
3. Otherwise a new organization is created with the derived name, the
   requested quota and the requested isolation segment.

No retries are made and nothing is cached between calls. Two concurrent
resolutions for the same account may both see no organizations and both
create one; uniqueness is left to the platform.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ignition.domain.organization.naming import organization_name
from ignition.foundation.domain.exceptions import (
    RemoteCreationError,
    RemoteLookupError,
)

if TYPE_CHECKING:
    from ignition.domain.organization.organization import (
        Organization,
        ProvisioningRequest,
    )
    from ignition.domain.organization.ports import PlatformClient

logger = logging.getLogger(__name__)


class OrganizationResolver:
    """Returns an existing or newly created organization for an account.

    Attributes:
        _platform: Platform client used for listing and creating organizations.
    """

    def __init__(self, platform: PlatformClient) -> None:
        self._platform = platform

    async def resolve(self, request: ProvisioningRequest) -> Organization:
        """Select or create the organization for ``request.account_name``.

        Args:
            request: Account, naming prefix, and target quota/segment.

        Returns:
            The selected or newly created organization.

        Raises:
            RemoteLookupError: If the organizations cannot be listed.
            RemoteCreationError: If a required creation call fails.
        """
        try:
            orgs = await self._platform.list_organizations(request.query)
        except Exception as exc:
            logger.warning(
                "organization_list_failed",
                extra={"account_name": request.account_name, "error": str(exc)},
            )
            raise RemoteLookupError(
                "cannot list organizations",
                account_name=request.account_name,
            ) from exc

        name = organization_name(request.name_prefix, request.account_name)

        for org in orgs:
            if org.name == name:
                logger.debug(
                    "organization_selected",
                    extra={"org_guid": org.guid, "match": "name"},
                )
                return org

        for org in orgs:
            if org.quota_definition_guid == request.quota_id:
                logger.debug(
                    "organization_selected",
                    extra={"org_guid": org.guid, "match": "quota"},
                )
                return org

        return await self._create(name, request)

    async def _create(self, name: str, request: ProvisioningRequest) -> Organization:
        try:
            org = await self._platform.create_organization(
                name,
                request.quota_id,
                request.isolation_segment_id,
            )
        except Exception as exc:
            logger.warning(
                "organization_create_failed",
                extra={"org_name": name, "error": str(exc)},
            )
            raise RemoteCreationError(
                f"cannot create organization: {name}",
                org_name=name,
            ) from exc

        logger.info(
            "organization_created",
            extra={"org_guid": org.guid, "org_name": org.name},
        )
        return org
