"""Shared fixtures: in-memory fakes for the platform and the IdP directory."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import pytest

from ignition.domain.organization import Organization
from ignition.foundation.domain.exceptions import NotFoundError


@dataclass
class FakePlatformClient:
    """Records calls and returns canned organizations."""

    orgs: list[Organization] = field(default_factory=list)
    list_error: Exception | None = None
    create_error: Exception | None = None
    created: Organization | None = None
    list_calls: list[dict[str, str]] = field(default_factory=list)
    create_calls: list[tuple[str, str, str]] = field(default_factory=list)

    async def list_organizations(self, query: Mapping[str, str]) -> list[Organization]:
        self.list_calls.append(dict(query))
        if self.list_error is not None:
            raise self.list_error
        return list(self.orgs)

    async def create_organization(
        self,
        name: str,
        quota_definition_guid: str,
        isolation_segment_guid: str,
    ) -> Organization:
        self.create_calls.append((name, quota_definition_guid, isolation_segment_guid))
        if self.create_error is not None:
            raise self.create_error
        if self.created is not None:
            return self.created
        return Organization(
            guid="created-org-guid",
            name=name,
            quota_definition_guid=quota_definition_guid,
            default_isolation_segment_guid=isolation_segment_guid,
        )


@dataclass
class FakeIdentityDirectory:
    """User directory keyed by account name."""

    users: dict[str, str] = field(default_factory=dict)
    find_error: Exception | None = None
    create_error: Exception | None = None
    create_calls: list[dict[str, str]] = field(default_factory=list)

    async def find_user_id(self, account_name: str) -> str:
        if self.find_error is not None:
            raise self.find_error
        if account_name not in self.users:
            raise NotFoundError(
                "User",
                account_name,
                message=f"cannot find user with account name: [{account_name}]",
            )
        return self.users[account_name]

    async def create_user(self, username: str, origin: str, external_id: str, email: str) -> str:
        self.create_calls.append(
            {"username": username, "origin": origin, "external_id": external_id, "email": email}
        )
        if self.create_error is not None:
            raise self.create_error
        user_id = f"uaa-{username}"
        self.users[username] = user_id
        return user_id


@pytest.fixture()
def platform() -> FakePlatformClient:
    return FakePlatformClient()


@pytest.fixture()
def directory() -> FakeIdentityDirectory:
    return FakeIdentityDirectory()
