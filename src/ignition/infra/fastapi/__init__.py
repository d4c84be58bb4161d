"""Ignition Infra FastAPI -- app factory, settings, dependencies, error handlers."""

from ignition.infra.fastapi.app_factory import create_app
from ignition.infra.fastapi.error_handlers import ProblemDetail, register_exception_handlers
from ignition.infra.fastapi.middleware import RequestIdMiddleware, get_request_id
from ignition.infra.fastapi.settings import (
    AppSettings,
    IgnitionSettings,
    get_ignition_settings,
)

__all__ = [
    "AppSettings",
    "IgnitionSettings",
    "ProblemDetail",
    "RequestIdMiddleware",
    "create_app",
    "get_ignition_settings",
    "get_request_id",
    "register_exception_handlers",
]
