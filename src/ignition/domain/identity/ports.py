"""Port interface for the identity provider's user directory."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IdentityDirectory(Protocol):
    """Capability set {query users, create user}.

    Implemented by :class:`ignition.infra.uaa.UAAClient`.
    """

    async def find_user_id(self, account_name: str) -> str:
        """Return the directory identifier of the user named ``account_name``.

        Raises:
            ValidationError: If ``account_name`` is empty.
            AuthenticationError: If no usable client/token is available.
            RemoteLookupError: If the directory query fails.
            NotFoundError: If no user has that account name.
        """
        ...

    async def create_user(
        self,
        username: str,
        origin: str,
        external_id: str,
        email: str,
    ) -> str:
        """Create an externally managed user and return its identifier.

        Raises:
            AuthenticationError: If no usable client/token is available.
            RemoteCreationError: If the directory rejects the request.
        """
        ...
