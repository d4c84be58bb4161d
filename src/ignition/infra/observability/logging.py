"""Structured logging for Ignition using structlog.

Two kinds of loggers feed the same output:

- structlog loggers from :func:`get_logger` (HTTP error handlers).
- stdlib ``logging`` loggers under the ``ignition`` namespace (domain
  services and remote clients), whose ``extra=`` fields are lifted into
  the event through ``structlog.stdlib.ProcessorFormatter``.

Both pick up the request ID bound by RequestIdMiddleware and have
credentials masked, including inside nested error context.

Output is JSON when running on Cloud Foundry (``VCAP_APPLICATION`` is set,
so loggregator receives one object per line) or when forced with
``IGNITION_LOG_FORMAT=json``; otherwise a console renderer is used.

Usage:
    from ignition.infra.observability import configure_logging, get_logger

    configure_logging()
    get_logger(__name__).warning("provisioning_failed", error_code="REMOTE_LOOKUP_FAILED")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Literal

import structlog
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from collections.abc import MutableMapping

Processor = structlog.types.Processor

APP_LOGGER_NAME = "ignition"

SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "authorization",
        "bearer",
        "credential",
        "credentials",
        "vcap_services",
    }
)
SENSITIVE_FRAGMENTS: tuple[str, ...] = ("token", "secret", "password")

REDACTED_VALUE: str = "***REDACTED***"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseSettings):
    """Logging settings.

    Environment Variables:
        IGNITION_LOG_LEVEL (or LOG_LEVEL): Minimum level, case-insensitive
        IGNITION_LOG_FORMAT: "json", "console", or "auto" (JSON on Cloud Foundry)
        VCAP_APPLICATION: Set by Cloud Foundry; only its presence is used

    Example:
        >>> LoggingSettings(level="debug", log_format="json").use_json_logs
        True
    """

    model_config = SettingsConfigDict(
        env_prefix="IGNITION_LOG_",
        extra="ignore",
        populate_by_name=True,
    )

    level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("IGNITION_LOG_LEVEL", "LOG_LEVEL"),
    )
    log_format: Literal["auto", "json", "console"] = Field(
        default="auto",
        validation_alias="IGNITION_LOG_FORMAT",
    )
    vcap_application: str | None = Field(
        default=None,
        validation_alias="VCAP_APPLICATION",
    )

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: Any) -> str:
        level = str(v).strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in _LEVELS:
            msg = f"log level must be one of {', '.join(_LEVELS)}"
            raise ValueError(msg)
        return level

    @property
    def on_cloud_foundry(self) -> bool:
        return bool(self.vcap_application)

    @property
    def use_json_logs(self) -> bool:
        if self.log_format == "auto":
            return self.on_cloud_foundry
        return self.log_format == "json"

    @property
    def level_int(self) -> int:
        return logging.getLevelNamesMapping()[self.level]


def _is_sensitive(key: str) -> bool:
    key_lower = key.lower()
    return key_lower in SENSITIVE_FIELDS or any(f in key_lower for f in SENSITIVE_FRAGMENTS)


def _redact(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: REDACTED_VALUE if _is_sensitive(str(k)) else _redact(v) for k, v in value.items()}
    return value


class SensitiveDataProcessor:
    """Mask credential-looking keys at any depth of the event.

    Error context dicts attached to provisioning failures are walked too, so
    a ``client_secret`` nested under ``context`` is masked like a top-level one.

    Example:
        >>> processor = SensitiveDataProcessor()
        >>> event = {"event": "x", "context": {"access_token": "abc"}}
        >>> processor(None, "warning", event)["context"]["access_token"]
        '***REDACTED***'
    """

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        for key, value in list(event_dict.items()):
            event_dict[key] = REDACTED_VALUE if _is_sensitive(key) else _redact(value)
        return event_dict


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Return cached settings; ``cache_clear()`` it in tests."""
    return LoggingSettings()


def _stdlib_handler(shared: list[Processor], renderer: Processor) -> logging.Handler:
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*shared, structlog.stdlib.ExtraAdder(), SensitiveDataProcessor()],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    return handler


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Configure structlog and the ``ignition`` stdlib logger tree.

    Called from the app lifespan. Safe to call again: the ``ignition``
    logger's handlers are replaced, not appended to.
    """
    settings = settings or get_logging_settings()

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if settings.use_json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.handlers = [_stdlib_handler(shared, renderer)]
    app_logger.setLevel(settings.level_int)
    app_logger.propagate = False

    structlog.configure(
        processors=[
            *shared,
            SensitiveDataProcessor(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(settings.level_int),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound to ``name`` when given."""
    logger = structlog.get_logger()
    return logger.bind(logger=name) if name is not None else logger
