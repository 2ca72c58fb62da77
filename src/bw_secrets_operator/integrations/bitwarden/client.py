"""Secrets Manager client factory.

The reconciler depends only on the :class:`BitwardenClientFactory` and
:class:`SecretsManagerClient` protocols.  :class:`SdkClientFactory` is the
production variant backed by the ``bitwarden-sdk`` package; tests provide an
in-memory variant.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from bw_secrets_operator.integrations.bitwarden.exceptions import (
    BitwardenAuthError,
    BitwardenClientError,
    BitwardenSyncError,
)
from bw_secrets_operator.integrations.bitwarden.models import SyncResponse

if TYPE_CHECKING:
    from bw_secrets_operator.integrations.bitwarden.config import BitwardenConfig

logger = structlog.get_logger()

USER_AGENT = "bw-secrets-operator"


class SecretsManagerClient(Protocol):
    """An authenticated-per-call Secrets Manager session."""

    def access_token_login(self, access_token: str, state_path: str) -> None: ...

    def sync(self, organization_id: str, last_synced: datetime | None) -> SyncResponse: ...

    def close(self) -> None: ...


class BitwardenClientFactory(Protocol):
    """Builds fresh Secrets Manager clients."""

    def get_client(self) -> SecretsManagerClient: ...

    def get_api_url(self) -> str: ...

    def get_identity_api_url(self) -> str: ...


class SdkSecretsManagerClient:
    """:class:`SecretsManagerClient` backed by ``bitwarden_sdk.BitwardenClient``."""

    def __init__(self, sdk_client: Any) -> None:
        self._sdk_client: Any | None = sdk_client

    def _require_client(self) -> Any:
        if self._sdk_client is None:
            raise BitwardenClientError("Secrets Manager client is closed")
        return self._sdk_client

    def access_token_login(self, access_token: str, state_path: str) -> None:
        """Authenticate the session with a machine account access token.

        Raises:
            BitwardenAuthError: If the SDK rejects the token.
        """
        client = self._require_client()
        try:
            response = client.auth().login_access_token(access_token, state_path)
        except Exception as e:
            raise BitwardenAuthError("Access token login failed", original_error=e) from e
        if getattr(response, "success", True) is False:
            raise BitwardenAuthError(
                f"Access token login failed: {getattr(response, 'error_message', 'unknown error')}"
            )

    def sync(self, organization_id: str, last_synced: datetime | None) -> SyncResponse:
        """Fetch the secrets changed since ``last_synced``.

        ``None`` asks for every secret the machine account can read.

        Raises:
            BitwardenSyncError: If the request fails or returns no payload.
        """
        client = self._require_client()
        try:
            response = client.secrets().sync(organization_id, last_synced)
        except Exception as e:
            raise BitwardenSyncError("Secrets sync request failed", original_error=e) from e

        data = getattr(response, "data", None)
        if data is None:
            raise BitwardenSyncError(
                f"Secrets sync returned no data: {getattr(response, 'error_message', None)}"
            )
        return SyncResponse.from_sdk_object(data)

    def close(self) -> None:
        """Drop the SDK handle; the native client is freed with it."""
        self._sdk_client = None


class SdkClientFactory:
    """Production :class:`BitwardenClientFactory`."""

    def __init__(self, config: BitwardenConfig) -> None:
        self._config = config

    def get_client(self) -> SecretsManagerClient:
        """Build a new SDK client pointed at the configured endpoints.

        Raises:
            BitwardenClientError: If the SDK cannot be initialized.
        """
        try:
            from bitwarden_sdk import BitwardenClient, DeviceType, client_settings_from_dict

            sdk_client = BitwardenClient(
                client_settings_from_dict(
                    {
                        "apiUrl": self._config.api_url,
                        "identityUrl": self._config.identity_api_url,
                        "deviceType": DeviceType.SDK,
                        "userAgent": USER_AGENT,
                    }
                )
            )
        except Exception as e:
            raise BitwardenClientError(
                "Failed to create Secrets Manager client", original_error=e
            ) from e

        logger.debug("created_secrets_manager_client", api_url=self._config.api_url)
        return SdkSecretsManagerClient(sdk_client)

    def get_api_url(self) -> str:
        return self._config.api_url

    def get_identity_api_url(self) -> str:
        return self._config.identity_api_url
