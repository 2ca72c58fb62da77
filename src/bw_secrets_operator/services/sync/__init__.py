"""Secrets Manager to Kubernetes Secret sync engine."""

from bw_secrets_operator.services.sync.clock import Clock, SystemClock
from bw_secrets_operator.services.sync.decision import (
    ECHO_GUARD_WINDOW,
    is_status_echo,
    next_sync_watermark,
    should_apply_delta,
)
from bw_secrets_operator.services.sync.delta import SyncDelta, pull_secret_deltas
from bw_secrets_operator.services.sync.exceptions import (
    OwnerReferenceError,
    SecretMapSerializationError,
    SyncError,
)
from bw_secrets_operator.services.sync.materializer import (
    BW_SECRET_LABEL,
    create_k8s_secret,
    set_controller_reference,
    update_secret_values,
)
from bw_secrets_operator.services.sync.metadata import (
    CUSTOM_MAP_ANNOTATION,
    SYNC_TIME_ANNOTATION,
    parse_secret_map_annotation,
    serialize_secret_map,
    set_k8s_secret_annotations,
)
from bw_secrets_operator.services.sync.reconciler import (
    BitwardenSecretReconciler,
    BitwardenSecretStore,
    ReconcileOutcome,
    ReconcileResult,
    SecretStore,
)
from bw_secrets_operator.services.sync.remapper import apply_secret_map, restore_source_keys

__all__ = [
    "BW_SECRET_LABEL",
    "CUSTOM_MAP_ANNOTATION",
    "ECHO_GUARD_WINDOW",
    "SYNC_TIME_ANNOTATION",
    "BitwardenSecretReconciler",
    "BitwardenSecretStore",
    "Clock",
    "OwnerReferenceError",
    "ReconcileOutcome",
    "ReconcileResult",
    "SecretMapSerializationError",
    "SecretStore",
    "SyncDelta",
    "SyncError",
    "SystemClock",
    "apply_secret_map",
    "create_k8s_secret",
    "is_status_echo",
    "next_sync_watermark",
    "parse_secret_map_annotation",
    "pull_secret_deltas",
    "restore_source_keys",
    "serialize_secret_map",
    "set_controller_reference",
    "set_k8s_secret_annotations",
    "should_apply_delta",
    "update_secret_values",
]
