"""Organization endpoint.

``GET /api/v1/organization`` returns the organization the authenticated
account should work in, creating it on the platform when necessary. Any
provisioning failure is answered with a generic 404 by the error handlers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ignition.domain.identity import UserRecord  # noqa: TC001 -- FastAPI resolves annotations at runtime
from ignition.domain.organization import (
    Organization,
    OrganizationResolver,
    ProvisioningRequest,
)
from ignition.infra.cloudfoundry import user_scope_query
from ignition.infra.fastapi.dependencies import (
    get_current_user,
    get_organization_resolver,
    get_settings,
)
from ignition.infra.fastapi.settings import IgnitionSettings

router = APIRouter(prefix="/api/v1", tags=["organization"])


class OrganizationResponse(BaseModel):
    guid: str
    name: str
    quota_definition_guid: str
    default_isolation_segment_guid: str
    created_at: str
    updated_at: str

    @classmethod
    def from_organization(cls, org: Organization) -> OrganizationResponse:
        return cls(
            guid=org.guid,
            name=org.name,
            quota_definition_guid=org.quota_definition_guid,
            default_isolation_segment_guid=org.default_isolation_segment_guid,
            created_at=org.created_at,
            updated_at=org.updated_at,
        )


@router.get("/organization")
async def get_organization(
    user: Annotated[UserRecord, Depends(get_current_user)],
    resolver: Annotated[OrganizationResolver, Depends(get_organization_resolver)],
    settings: Annotated[IgnitionSettings, Depends(get_settings)],
) -> OrganizationResponse:
    """Return the caller's organization, creating it if none matches."""
    request = ProvisioningRequest(
        account_name=user.account_name,
        name_prefix=settings.org_prefix,
        quota_id=settings.quota_id,
        isolation_segment_id=settings.iso_segment_id,
        query=user_scope_query(user.user_id),
    )
    org = await resolver.resolve(request)
    return OrganizationResponse.from_organization(org)
