"""HTTP routers for the Ignition app."""

from ignition.infra.fastapi.routers.organization import OrganizationResponse
from ignition.infra.fastapi.routers.organization import router as organization_router

__all__ = ["OrganizationResponse", "organization_router"]
