"""Organization name derivation."""

from __future__ import annotations


def organization_name(prefix: str, account_name: str) -> str:
    """Derive the canonical organization name for an account.

    The local part of the account is the text before ``@`` for email
    addresses, the text after ``\\`` for domain accounts, and the whole
    identifier otherwise. Both halves are lower-cased, so the result does
    not depend on input casing.

    Example:
        >>> organization_name("igNiTion", "tEsT@example.net")
        'ignition-test'
        >>> organization_name("ignition", "corp\\\\test")
        'ignition-test'
    """
    if "@" in account_name:
        local = account_name.split("@", 1)[0]
    elif "\\" in account_name:
        local = account_name.split("\\", 1)[1]
    else:
        local = account_name
    return f"{prefix.lower()}-{local.lower()}"
