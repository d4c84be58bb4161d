"""Domain exception hierarchy for provisioning errors.

Every failure in organization resolution and IdP user management is raised
as a subclass of :class:`DomainError`. Each class carries a machine-readable
``error_code`` and structured ``context`` so the HTTP layer can collapse them
into a generic response while logs keep the original category.

Example:
    >>> from ignition.foundation.domain.exceptions import NotFoundError
    >>> raise NotFoundError("User", "tester@example.com")
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "AmbiguousMatchError",
    "AuthenticationError",
    "DomainError",
    "NotFoundError",
    "RemoteCreationError",
    "RemoteLookupError",
    "ValidationError",
]


class DomainError(Exception):
    """Base class for all provisioning errors.

    Attributes:
        error_code: Machine-readable error code for client handling.
        message: Human-readable error description.
        context: Structured debugging information (account names, resource types).

    Example:
        >>> raise DomainError("Operation failed", context={"account_name": "alice"})
        DomainError: Operation failed (account_name=alice)
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize domain error with message and optional context.

        Args:
            message: Human-readable error description.
            context: Structured debugging information. Keys should be snake_case.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return the plain message; context is reported separately."""
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ValidationError(DomainError):
    """Raised when required input is missing or malformed, before any I/O.

    Attributes:
        error_code: "VALIDATION_ERROR" (class constant).
        field: Name of the offending input.
        reason: Human-readable validation failure reason.

    Example:
        >>> raise ValidationError("account_name", "cannot search for a user with an empty account name")
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str, **extra_context: Any) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason, {"field": field, "reason": reason, **extra_context})


class AuthenticationError(DomainError):
    """Raised when no usable http client or access token is available.

    Distinct from remote failures: the request never reached the remote
    directory because the caller could not authenticate.
    """

    error_code: str = "AUTHENTICATION_ERROR"

    def __init__(
        self,
        message: str = "uaa: cannot authenticate",
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)


class NotFoundError(DomainError):
    """Raised when a query succeeded but matched no record.

    Attributes:
        error_code: "RESOURCE_NOT_FOUND" (class constant).
        resource_type: Type of missing resource (e.g. "User").
        resource_id: Identifier that was searched for.
    """

    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        message: str | None = None,
        **extra_context: Any,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        context = {
            "resource_type": resource_type,
            "resource_id": resource_id,
            **extra_context,
        }
        super().__init__(message or f"{resource_type} not found: {resource_id}", context)


class RemoteLookupError(DomainError):
    """Raised when a remote list/query call fails or returns a non-success status.

    Attributes:
        error_code: "REMOTE_LOOKUP_FAILED" (class constant).
        status_code: HTTP status from the remote system, if one was received.
    """

    error_code: str = "REMOTE_LOOKUP_FAILED"

    def __init__(self, message: str, status_code: int | None = None, **context: Any) -> None:
        self.status_code = status_code
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context)


class RemoteCreationError(DomainError):
    """Raised when a remote create call fails, returns a non-success status,
    or answers with a body that does not describe the created record.
    """

    error_code: str = "REMOTE_CREATION_FAILED"

    def __init__(self, message: str, status_code: int | None = None, **context: Any) -> None:
        self.status_code = status_code
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context)


class AmbiguousMatchError(DomainError):
    """Raised when a lookup that must identify one record matched several."""

    error_code: str = "AMBIGUOUS_MATCH"

    def __init__(self, resource_type: str, resource_id: str, matches: int) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.matches = matches
        super().__init__(
            f"found {matches} {resource_type.lower()} records for: [{resource_id}]",
            {"resource_type": resource_type, "resource_id": resource_id, "matches": matches},
        )
