"""Sync metadata annotations on the target Secret.

Two annotations let anyone inspecting the Secret see what the operator last
applied:

* ``k8s.bitwarden.com/sync-time``: RFC3339 UTC instant of the last write.
* ``k8s.bitwarden.com/custom-map``: the active key-map as indented JSON,
  present only while the BitwardenSecret declares a map.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from bw_secrets_operator.integrations.kubernetes.models.base import format_rfc3339_nano
from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
    BitwardenSecret,
    SecretMapping,
)
from bw_secrets_operator.integrations.kubernetes.models.secret import TargetSecret
from bw_secrets_operator.services.sync.exceptions import SecretMapSerializationError

SYNC_TIME_ANNOTATION = "k8s.bitwarden.com/sync-time"
CUSTOM_MAP_ANNOTATION = "k8s.bitwarden.com/custom-map"

_SECRET_MAP_ADAPTER = TypeAdapter(list[SecretMapping])


def serialize_secret_map(secret_map: Sequence[SecretMapping]) -> str:
    """Render a key-map as 2-space indented JSON with camelCase keys.

    Raises:
        SecretMapSerializationError: If the map cannot be serialized.
    """
    try:
        return _SECRET_MAP_ADAPTER.dump_json(list(secret_map), indent=2, by_alias=True).decode(
            "utf-8"
        )
    except PydanticSerializationError as e:
        raise SecretMapSerializationError(f"Cannot serialize secret map: {e}") from e


def parse_secret_map_annotation(text: str) -> list[SecretMapping]:
    """Parse a ``custom-map`` annotation back into mappings, preserving order.

    Raises:
        ValueError: If the annotation is not a valid serialized key-map.
    """
    try:
        return _SECRET_MAP_ADAPTER.validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid {CUSTOM_MAP_ANNOTATION} annotation: {e}") from e


def set_k8s_secret_annotations(
    bw_secret: BitwardenSecret,
    secret: TargetSecret,
    now: datetime,
) -> None:
    """Stamp the sync time and mirror the active key-map onto ``secret``.

    Raises:
        SecretMapSerializationError: If the key-map cannot be serialized. The
            Secret's annotations are left untouched in that case.
    """
    secret_map = bw_secret.spec.secret_map
    custom_map = serialize_secret_map(secret_map) if secret_map is not None else None

    secret.annotations[SYNC_TIME_ANNOTATION] = format_rfc3339_nano(now)
    if custom_map is None:
        secret.annotations.pop(CUSTOM_MAP_ANNOTATION, None)
    else:
        secret.annotations[CUSTOM_MAP_ANNOTATION] = custom_map
