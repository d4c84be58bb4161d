"""Application and provisioning settings.

``AppSettings`` (``APP_`` prefix) configures the FastAPI application and
which browser origins may call it.
``IgnitionSettings`` (``IGNITION_`` prefix) configures organization
provisioning, the Cloud Controller and UAA endpoints, and the OAuth client
of the external login front-end.

With ``IGNITION_AUTH_VARIANT=p-identity`` the OAuth client is taken from the
Single Sign On service instance named ``identity`` in ``VCAP_SERVICES``
instead of the ``IGNITION_AUTH_URL``/``IGNITION_TOKEN_URL``/
``IGNITION_CLIENT_ID``/``IGNITION_CLIENT_SECRET`` variables.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SSO_VARIANT = "p-identity"
SSO_INSTANCE_NAME = "identity"


class AppSettings(BaseSettings):
    """Application factory settings.

    Environment variables use the ``APP_`` prefix (e.g., ``APP_TITLE``).
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        extra="ignore",
    )

    title: str = Field(default="Ignition")
    version: str = Field(default="0.1.0")
    description: str = Field(default="Organization provisioning for new platform users")
    docs_url: str | None = Field(default="/docs")
    openapi_url: str | None = Field(default="/openapi.json")
    debug: bool = Field(default=False)
    cors_origins: str = Field(
        default="",
        description="Comma-separated origins allowed to call the API from a browser",
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def _sso_credentials(vcap_services: dict[str, Any]) -> dict[str, Any]:
    for instance in vcap_services.get(SSO_VARIANT) or []:
        if instance.get("name") == SSO_INSTANCE_NAME:
            return instance.get("credentials") or {}
    msg = (
        f'a Single Sign On service instance with the name "{SSO_INSTANCE_NAME}" '
        "is required to use this app"
    )
    raise ValueError(msg)


class IgnitionSettings(BaseSettings):
    """Provisioning configuration loaded from environment variables.

    The OAuth client fields (``auth_variant``, ``auth_url``, ``token_url``,
    ``auth_scopes``, ``client_id``, ``client_secret``) are not used by the
    provisioning flow. They configure the external login front-end that
    authenticates users and sets ``X-Account-Name``; they live here so a
    missing or incomplete Single Sign On binding fails at startup like the
    rest of the configuration. Ignition's own calls use ``api_client_id``
    and ``api_client_secret``.

    Environment Variables:
        IGNITION_ORG_PREFIX: Prefix for derived organization names
        IGNITION_QUOTA_ID: Quota definition GUID for new organizations
        IGNITION_ISO_SEGMENT_ID: Default isolation segment GUID for new organizations
        IGNITION_API_URL: Cloud Controller URL
        IGNITION_UAA_URL: UAA URL
        IGNITION_UAA_ORIGIN: Origin recorded on users created in UAA
        IGNITION_API_CLIENT_ID: UAA client used for Cloud Controller and SCIM calls
        IGNITION_API_CLIENT_SECRET: Secret for IGNITION_API_CLIENT_ID (hidden from repr)
        IGNITION_AUTH_VARIANT: "p-identity" for the SSO service binding, anything else for generic OAuth2
        IGNITION_AUTH_URL: OAuth2 authorization URL
        IGNITION_TOKEN_URL: OAuth2 token URL
        IGNITION_AUTH_SCOPES: OAuth2 scopes (comma-separated)
        IGNITION_CLIENT_ID: OAuth2 client_id
        IGNITION_CLIENT_SECRET: OAuth2 client_secret (hidden from repr)
        IGNITION_HTTP_TIMEOUT: Timeout in seconds for outbound HTTP calls
        VCAP_SERVICES: Cloud Foundry service bindings (JSON)

    Example:
        >>> settings = IgnitionSettings(_env_file=None)
        >>> settings.org_prefix
        'ignition'
        >>> settings.scopes
        ['openid', 'profile', 'user_attributes']
    """

    model_config = SettingsConfigDict(
        env_prefix="IGNITION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    org_prefix: str = Field(default="ignition", description="Organization name prefix")
    quota_id: str = Field(default="", description="Quota definition GUID")
    iso_segment_id: str = Field(default="", description="Default isolation segment GUID")

    api_url: str = Field(default="", description="Cloud Controller URL")
    uaa_url: str = Field(default="", description="UAA URL")
    uaa_origin: str = Field(default="uaa", description="Origin for users created in UAA")
    api_client_id: str = Field(default="", description="UAA client for platform calls")
    api_client_secret: str = Field(
        default="",
        repr=False,
        description="Secret for the platform UAA client",
    )
    http_timeout: float = Field(default=10.0, gt=0, description="Outbound HTTP timeout")

    auth_variant: str = Field(default="openid", description="OAuth2 variant")
    auth_url: str = Field(default="", description="OAuth2 authorization URL")
    token_url: str = Field(default="", description="OAuth2 token URL")
    auth_scopes: str = Field(
        default="openid,profile,user_attributes",
        description="OAuth2 scopes (comma-separated)",
    )
    client_id: str = Field(default="", description="OAuth2 client_id")
    client_secret: str = Field(default="", repr=False, description="OAuth2 client_secret")

    vcap_services: dict[str, Any] = Field(default_factory=dict, alias="VCAP_SERVICES")

    @model_validator(mode="after")
    def _apply_sso_binding(self) -> IgnitionSettings:
        if self.auth_variant != SSO_VARIANT:
            return self

        credentials = _sso_credentials(self.vcap_services)
        values: dict[str, str] = {}
        for key in ("auth_domain", "client_id", "client_secret"):
            value = credentials.get(key)
            if not value:
                msg = (
                    f"could not retrieve the {key}; make sure you have created and bound "
                    f'a Single Sign On service instance with the name "{SSO_INSTANCE_NAME}"'
                )
                raise ValueError(msg)
            values[key] = str(value)

        auth_domain = values["auth_domain"].rstrip("/")
        self.auth_url = f"{auth_domain}/oauth/authorize"
        self.token_url = f"{auth_domain}/oauth/token"
        self.client_id = values["client_id"]
        self.client_secret = values["client_secret"]
        return self

    @property
    def scopes(self) -> list[str]:
        return [s.strip() for s in self.auth_scopes.split(",") if s.strip()]

    @property
    def uaa_token_url(self) -> str:
        """Token endpoint used for client-credentials calls to UAA."""
        return f"{self.uaa_url.rstrip('/')}/oauth/token"


@lru_cache(maxsize=1)
def get_ignition_settings() -> IgnitionSettings:
    """Get singleton IgnitionSettings instance.

    Clear cache with ``get_ignition_settings.cache_clear()`` for testing.
    """
    return IgnitionSettings()
