"""ASGI middleware for the Ignition app."""

from ignition.infra.fastapi.middleware.request_id import (
    REQUEST_ID_HEADER,
    VCAP_REQUEST_ID_HEADER,
    RequestIdMiddleware,
    get_request_id,
    propagate_request_id,
)

__all__ = [
    "REQUEST_ID_HEADER",
    "VCAP_REQUEST_ID_HEADER",
    "RequestIdMiddleware",
    "get_request_id",
    "propagate_request_id",
]
