"""Application lifespan: logging setup and the shared HTTP connection pool."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx

from ignition.infra.fastapi.middleware import propagate_request_id
from ignition.infra.observability import configure_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from contextlib import AbstractAsyncContextManager

    from fastapi import FastAPI

    from ignition.infra.fastapi.settings import IgnitionSettings

logger = logging.getLogger(__name__)


def build_lifespan(
    settings: IgnitionSettings,
    http_client: httpx.AsyncClient | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Create the lifespan context manager for the app.

    Args:
        settings: Provisioning settings stored on ``app.state``.
        http_client: Optional pre-built client (e.g. with a mock transport).
            When omitted, one that forwards the request ID is created on
            startup and closed on shutdown.

    Returns:
        An async context manager factory suitable for FastAPI's ``lifespan`` parameter.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        owns_client = http_client is None
        client = http_client or httpx.AsyncClient(
            timeout=settings.http_timeout,
            event_hooks={"request": [propagate_request_id]},
        )
        app.state.ignition_settings = settings
        app.state.http_client = client
        logger.info(
            "ignition_started",
            extra={"api_url": settings.api_url, "uaa_url": settings.uaa_url},
        )
        try:
            yield
        finally:
            if owns_client:
                await client.aclose()

    return lifespan
