"""FastAPI application factory.

Wires optional CORS, request-id propagation, problem-details error handlers, the
organization and health routers, and the lifespan that owns the shared
``httpx.AsyncClient``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from ignition.infra.fastapi._health import router as health_router
from ignition.infra.fastapi.error_handlers import register_exception_handlers
from ignition.infra.fastapi.lifespan import build_lifespan
from ignition.infra.fastapi.middleware import RequestIdMiddleware
from ignition.infra.fastapi.routers import organization_router
from ignition.infra.fastapi.settings import AppSettings, get_ignition_settings

if TYPE_CHECKING:
    import httpx

    from ignition.infra.fastapi.settings import IgnitionSettings

logger = logging.getLogger(__name__)


def create_app(
    settings: AppSettings | None = None,
    ignition_settings: IgnitionSettings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the Ignition FastAPI application.

    Args:
        settings: Application settings. If ``None``, loaded from environment.
        ignition_settings: Provisioning settings. If ``None``, loaded from environment.
        http_client: Optional shared client for outbound calls. The caller
            keeps ownership; otherwise the lifespan creates and closes one.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or AppSettings()
    ignition_settings = ignition_settings or get_ignition_settings()

    app = FastAPI(
        title=settings.title,
        version=settings.version,
        description=settings.description,
        docs_url=settings.docs_url,
        redoc_url=None,
        openapi_url=settings.openapi_url,
        debug=settings.debug,
        lifespan=build_lifespan(ignition_settings, http_client),
    )

    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["GET"],
            allow_headers=["X-Request-ID"],
            expose_headers=["X-Request-ID"],
        )
    # Outermost, so CORS preflights get a request ID too
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    for router in (health_router, organization_router):
        app.include_router(router)
        logger.debug("router_included", extra={"tags": router.tags})

    return app
