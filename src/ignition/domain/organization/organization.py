"""Organization value types exchanged with the platform."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Organization:
    """A tenant workspace as reported by the platform.

    Organizations are owned by the platform: this service reads or creates
    them but never updates or deletes one.

    Attributes:
        guid: Platform-assigned identifier, immutable once created.
        name: Organization name.
        quota_definition_guid: Quota definition applied to the organization.
        default_isolation_segment_guid: Default isolation segment, if any.
        created_at: Creation timestamp as reported by the platform.
        updated_at: Last update timestamp as reported by the platform.
    """

    guid: str
    name: str
    quota_definition_guid: str = ""
    default_isolation_segment_guid: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True, slots=True)
class ProvisioningRequest:
    """Target state for resolving a user's organization.

    Attributes:
        account_name: Authenticated account (email, ``DOMAIN\\user`` or username).
        name_prefix: Prefix for derived organization names.
        quota_id: Quota definition the organization should carry.
        isolation_segment_id: Default isolation segment for new organizations.
        query: Platform list query scoping the candidate organizations. Passed
            through to the platform client untouched.
    """

    account_name: str
    name_prefix: str
    quota_id: str
    isolation_segment_id: str
    query: Mapping[str, str] = field(default_factory=dict)
