"""Applying the optional id-to-key map to the target Secret."""

from __future__ import annotations

from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import BitwardenSecret
from bw_secrets_operator.integrations.kubernetes.models.secret import TargetSecret
from bw_secrets_operator.services.sync.metadata import (
    CUSTOM_MAP_ANNOTATION,
    parse_secret_map_annotation,
)


def restore_source_keys(secret: TargetSecret) -> None:
    """Re-key data written under a previous map back to Secrets Manager ids.

    The ``custom-map`` annotation records the map that produced the current
    keys.  Inverting it recovers the id-keyed values accumulated by earlier
    syncs, so a delta that omits a mapped id keeps that id's value.  A Secret
    without the annotation is already keyed by id and is left alone.

    Raises:
        ValueError: If the annotation cannot be parsed.
    """
    text = secret.annotations.get(CUSTOM_MAP_ANNOTATION)
    if text is None:
        return

    restored: dict[str, bytes] = {}
    for mapping in parse_secret_map_annotation(text):
        value = secret.data.get(mapping.secret_key_name)
        if value is not None:
            restored.setdefault(mapping.bw_secret_id, value)

    secret.data = restored


def apply_secret_map(bw_secret: BitwardenSecret, secret: TargetSecret) -> None:
    """Narrow and rename the Secret's keys according to ``spec.map``.

    Without a map every key is left in place.  With a map the data is
    rebuilt from scratch: each ``bwSecretId`` present in the accumulated data
    is stored under its ``secretKeyName``; ids that are missing are skipped.
    """
    secret_map = bw_secret.spec.secret_map
    if secret_map is None:
        return

    filtered: dict[str, bytes] = {}
    for mapping in secret_map:
        value = secret.data.get(mapping.bw_secret_id)
        if value is not None:
            filtered[mapping.secret_key_name] = value

    secret.data = filtered
