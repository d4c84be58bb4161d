"""Request ID propagation.

The inbound ID is taken from ``X-Request-ID``, falling back to the
``X-Vcap-Request-Id`` that the Cloud Foundry router stamps on every request;
a fresh UUID4 is used when neither is a UUID. The ID is echoed on the
response, merged into every structlog entry, and forwarded to UAA and the
Cloud Controller through :func:`propagate_request_id` so one provisioning
attempt can be followed across all three logs.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import structlog
from starlette.datastructures import Headers, MutableHeaders

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

REQUEST_ID_HEADER = "X-Request-ID"
VCAP_REQUEST_ID_HEADER = "X-Vcap-Request-Id"

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Return the current request ID, or an empty string outside a request."""
    return request_id_ctx.get()


def _as_uuid(value: str | None) -> str | None:
    if not value:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


def resolve_request_id(headers: Headers) -> str:
    """Pick the caller's ID, then the router's, else generate one."""
    return (
        _as_uuid(headers.get(REQUEST_ID_HEADER))
        or _as_uuid(headers.get(VCAP_REQUEST_ID_HEADER))
        or str(uuid.uuid4())
    )


async def propagate_request_id(request: httpx.Request) -> None:
    """httpx request hook adding the current ID to outbound calls."""
    request_id = get_request_id()
    if request_id and VCAP_REQUEST_ID_HEADER not in request.headers:
        request.headers[VCAP_REQUEST_ID_HEADER] = request_id


class RequestIdMiddleware:
    """Pure ASGI middleware binding the request ID for the request's duration.

    Malformed client IDs are replaced, never rejected.
    """

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = resolve_request_id(Headers(scope=scope))
        token = request_id_ctx.set(request_id)
        bound = structlog.contextvars.bind_contextvars(request_id=request_id)

        async def send_with_request_id(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            structlog.contextvars.reset_contextvars(**bound)
            request_id_ctx.reset(token)
