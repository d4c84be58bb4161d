"""Ignition Foundation Domain -- shared error types."""

from ignition.foundation.domain.exceptions import (
    AmbiguousMatchError,
    AuthenticationError,
    DomainError,
    NotFoundError,
    RemoteCreationError,
    RemoteLookupError,
    ValidationError,
)

__all__ = [
    "AmbiguousMatchError",
    "AuthenticationError",
    "DomainError",
    "NotFoundError",
    "RemoteCreationError",
    "RemoteLookupError",
    "ValidationError",
]
