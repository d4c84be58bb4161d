"""Problem-details (RFC 7807) responses for provisioning failures.

Callers of ``/api/v1/organization`` only ever learn that no organization
could be produced: every :class:`DomainError` (bad input, UAA or Cloud
Controller auth, remote lookup, not-found, remote creation) becomes the same
404 body. What actually went wrong is logged with the error's code and
context, keyed by the correlation ID that is also returned to the caller.

Usage:
    app = FastAPI()
    register_exception_handlers(app)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ignition.foundation.domain.exceptions import (
    AuthenticationError,
    DomainError,
    RemoteCreationError,
    RemoteLookupError,
)
from ignition.infra.fastapi.middleware.request_id import get_request_id
from ignition.infra.observability import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

PROBLEM_MEDIA_TYPE = "application/problem+json"

NOT_FOUND_DETAIL = "The requested resource could not be found."
INTERNAL_ERROR_DETAIL = "An internal error occurred. Please contact support with the correlation ID."

# Failures of UAA or the Cloud Controller are operational; the rest are the caller's
_OPERATIONAL_ERRORS = (AuthenticationError, RemoteCreationError, RemoteLookupError)


class ProblemDetail(BaseModel):
    """RFC 7807 body with ``error_code`` and ``correlation_id`` extensions."""

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    error_code: str | None = None
    correlation_id: str | None = None


def _problem(request: Request, status: int, title: str, detail: str, error_code: str) -> JSONResponse:
    slug = title.lower().replace(" ", "-")
    problem = ProblemDetail(
        type=f"/errors/{slug}",
        title=title,
        status=status,
        detail=detail,
        instance=request.url.path,
        error_code=error_code,
        correlation_id=get_request_id() or "unknown",
    )
    return JSONResponse(
        status_code=status,
        content=problem.model_dump(exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def provisioning_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Log the real failure, answer with the generic not-found problem."""
    log = get_logger(__name__).bind(
        error_code=exc.error_code,
        error_type=type(exc).__name__,
        context=exc.context,
        path=request.url.path,
    )
    if isinstance(exc, _OPERATIONAL_ERRORS):
        log.error("provisioning_failed", error=exc.message)
    else:
        log.warning("provisioning_rejected", error=exc.message)
    return _problem(request, 404, "Not Found", NOT_FOUND_DETAIL, "RESOURCE_NOT_FOUND")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for bugs; the exception text is only exposed in debug mode."""
    get_logger(__name__).exception(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        exception_type=type(exc).__name__,
    )
    detail = f"{type(exc).__name__}: {exc}" if request.app.debug else INTERNAL_ERROR_DETAIL
    return _problem(request, 500, "Internal Server Error", detail, "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette types handlers as taking a plain Exception
    handlers: list[tuple[type[Exception], Any]] = [
        (DomainError, provisioning_error_handler),
        (Exception, unhandled_exception_handler),
    ]
    for exception_class, handler in handlers:
        app.add_exception_handler(exception_class, handler)
