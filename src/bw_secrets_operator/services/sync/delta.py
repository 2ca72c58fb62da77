"""Pulling secret deltas from Secrets Manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

import structlog

from bw_secrets_operator.integrations.bitwarden.exceptions import (
    BitwardenError,
    BitwardenSyncError,
)

if TYPE_CHECKING:
    from bw_secrets_operator.integrations.bitwarden.client import BitwardenClientFactory

logger = structlog.get_logger()


@dataclass(frozen=True)
class SyncDelta:
    """Secrets changed since the watermark, keyed by Secrets Manager id."""

    has_changes: bool
    values: dict[str, bytes] = field(default_factory=dict, repr=False)


def pull_secret_deltas(
    client_factory: BitwardenClientFactory,
    organization_id: str,
    access_token: str,
    last_sync: datetime | None,
    state_path: str,
) -> SyncDelta:
    """Log in with ``access_token`` and fetch the secrets changed since ``last_sync``.

    A fresh client is built for every call and always closed before returning.
    The result is all-or-nothing: any failure raises and no values are returned.

    Args:
        client_factory: Builds the Secrets Manager client.
        organization_id: Organization the machine account belongs to.
        access_token: Machine account access token.
        last_sync: Watermark of the last successful sync, None for a full pull.
        state_path: SDK state location passed through to the login call.

    Raises:
        BitwardenError: If the client cannot be built, login fails or the
            fetch fails.
    """
    log = logger.bind(organization_id=organization_id)
    client = client_factory.get_client()
    try:
        client.access_token_login(access_token, state_path)
        response = client.sync(organization_id, last_sync)
    except BitwardenError as e:
        log.error("secrets_pull_failed", error=str(e))
        raise
    except Exception as e:
        log.error("secrets_pull_failed", error=str(e))
        raise BitwardenSyncError("Unexpected Secrets Manager failure", original_error=e) from e
    finally:
        client.close()

    values = {secret.id: secret.value.encode("utf-8") for secret in response.secrets}
    log.debug("secrets_pulled", has_changes=response.has_changes, count=len(values))
    return SyncDelta(has_changes=response.has_changes, values=values)
