"""User provisioning against the identity provider.

Makes sure the authenticated account has a user record in the IdP before an
organization is assigned:

1. Look up the user by account name.
2. If the directory has no such user, create it as an externally managed
   account (``origin``) linked back to the account name.

There is no reservation step and no retry: two concurrent calls for the same
account can both create a record unless the directory rejects duplicates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ignition.foundation.domain.exceptions import NotFoundError

if TYPE_CHECKING:
    from ignition.domain.identity.ports import IdentityDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UserRecord:
    """An account name and the identifier the IdP assigned to it."""

    account_name: str
    user_id: str


class UserProvisioningService:
    """Finds or creates the IdP user for an authenticated account.

    Attributes:
        _directory: User directory of the identity provider.
        _origin: Origin tag marking created users as externally managed.
    """

    def __init__(self, directory: IdentityDirectory, origin: str) -> None:
        self._directory = directory
        self._origin = origin

    async def ensure_user(self, account_name: str, email: str | None = None) -> UserRecord:
        """Return the user's record, creating it in the IdP when missing.

        Args:
            account_name: Authenticated account name.
            email: Email to record on creation. Defaults to ``account_name``.

        Returns:
            UserRecord with the IdP user identifier.

        Raises:
            ValidationError: If ``account_name`` is empty.
            AuthenticationError: If the directory client cannot authenticate.
            RemoteLookupError: If the lookup fails for reasons other than not-found.
            RemoteCreationError: If the user has to be created and creation fails.
        """
        try:
            user_id = await self._directory.find_user_id(account_name)
        except NotFoundError:
            logger.debug("user_provisioning_started", extra={"account_name": account_name})
        else:
            logger.debug(
                "user_provisioning_skipped",
                extra={"account_name": account_name, "user_id": user_id},
            )
            return UserRecord(account_name=account_name, user_id=user_id)

        user_id = await self._directory.create_user(
            username=account_name,
            origin=self._origin,
            external_id=account_name,
            email=email or account_name,
        )
        logger.info(
            "user_provisioned",
            extra={"account_name": account_name, "user_id": user_id, "origin": self._origin},
        )
        return UserRecord(account_name=account_name, user_id=user_id)
