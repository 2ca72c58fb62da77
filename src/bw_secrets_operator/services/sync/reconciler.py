"""BitwardenSecret reconciliation loop.

One :meth:`BitwardenSecretReconciler.reconcile` call converges the target
Secret of a single BitwardenSecret:

1. skip if the call is the echo of the loop's own status update;
2. read the auth token Secret;
3. pull the secrets changed since ``status.lastSuccessfulSyncTime``;
4. when something changed, create the target Secret if needed, re-key values
   stored under the previous key-map to their ids, merge the new values,
   apply the key-map, stamp the annotations and persist it;
5. record ``SuccessfulSync`` and advance the watermark, or ``FailedSync``.

Every path except "declaration gone" and "echo" asks to run again after the
refresh interval, whether the attempt succeeded or not.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

import structlog

from bw_secrets_operator.integrations.bitwarden.exceptions import BitwardenError
from bw_secrets_operator.integrations.kubernetes.exceptions import (
    KubernetesError,
    KubernetesNotFoundError,
)
from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
    BitwardenSecret,
    ConditionReason,
    ConditionType,
)
from bw_secrets_operator.services.sync.clock import Clock, SystemClock
from bw_secrets_operator.services.sync.decision import (
    ECHO_GUARD_WINDOW,
    is_status_echo,
    next_sync_watermark,
    should_apply_delta,
)
from bw_secrets_operator.services.sync.delta import pull_secret_deltas
from bw_secrets_operator.services.sync.exceptions import (
    OwnerReferenceError,
    SecretMapSerializationError,
)
from bw_secrets_operator.services.sync.materializer import (
    create_k8s_secret,
    set_controller_reference,
    update_secret_values,
)
from bw_secrets_operator.services.sync.metadata import (
    CUSTOM_MAP_ANNOTATION,
    set_k8s_secret_annotations,
)
from bw_secrets_operator.services.sync.remapper import apply_secret_map, restore_source_keys

if TYPE_CHECKING:
    from bw_secrets_operator.integrations.bitwarden.client import BitwardenClientFactory
    from bw_secrets_operator.integrations.kubernetes.models.secret import TargetSecret

logger = structlog.get_logger()


class BitwardenSecretStore(Protocol):
    """Reads declarations and writes their status."""

    def get(self, namespace: str, name: str) -> BitwardenSecret: ...

    def update_status(self, bw_secret: BitwardenSecret) -> BitwardenSecret: ...


class SecretStore(Protocol):
    """Reads and writes core Secrets."""

    def get(self, namespace: str, name: str) -> TargetSecret: ...

    def create(self, secret: TargetSecret) -> TargetSecret: ...

    def update(self, secret: TargetSecret) -> TargetSecret: ...


class ReconcileOutcome(StrEnum):
    """What a single reconcile invocation did."""

    NOT_FOUND = "not_found"
    LOOKUP_FAILED = "lookup_failed"
    SKIPPED_ECHO = "skipped_echo"
    NO_CHANGES = "no_changes"
    SYNCED = "synced"
    FAILED = "failed"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a reconcile and when to run it again.

    ``requeue_after`` is None when the caller should not schedule another run
    for this invocation.
    """

    outcome: ReconcileOutcome
    requeue_after: timedelta | None = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome not in (ReconcileOutcome.FAILED, ReconcileOutcome.LOOKUP_FAILED)


class BitwardenSecretReconciler:
    """Converges BitwardenSecret targets with Secrets Manager.

    The reconciler holds no per-object state; callers must not run two
    reconciles of the same object concurrently.
    """

    def __init__(
        self,
        bitwarden_secrets: BitwardenSecretStore,
        secrets: SecretStore,
        client_factory: BitwardenClientFactory,
        *,
        state_path: str,
        refresh_interval: int,
        clock: Clock | None = None,
        guard_window: timedelta = ECHO_GUARD_WINDOW,
    ) -> None:
        """Initialize the reconciler.

        Args:
            bitwarden_secrets: Store for BitwardenSecret declarations.
            secrets: Store for core Secrets.
            client_factory: Builds Secrets Manager clients.
            state_path: SDK state location passed to every login.
            refresh_interval: Seconds until the next run, on success and failure.
            clock: Time source, the wall clock by default.
            guard_window: How long after a sync invocations count as echoes.
        """
        self._bitwarden_secrets = bitwarden_secrets
        self._secrets = secrets
        self._client_factory = client_factory
        self._state_path = state_path
        self._requeue_after = timedelta(seconds=refresh_interval)
        self._clock = clock or SystemClock()
        self._guard_window = guard_window

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Run one reconciliation of the BitwardenSecret ``namespace/name``."""
        log = logger.bind(namespace=namespace, name=name)

        try:
            bw_secret = self._bitwarden_secrets.get(namespace, name)
        except KubernetesNotFoundError:
            log.info("bitwarden_secret_deleted")
            return ReconcileResult(ReconcileOutcome.NOT_FOUND)
        except KubernetesError as e:
            log.error("bitwarden_secret_lookup_failed", error=str(e))
            return ReconcileResult(
                ReconcileOutcome.LOOKUP_FAILED,
                self._requeue_after,
                f"Error looking up BitwardenSecret - {e}",
            )

        if is_status_echo(
            bw_secret.status.last_successful_sync_time,
            self._clock.now(),
            self._guard_window,
        ):
            log.debug("skipping_status_echo")
            return ReconcileResult(ReconcileOutcome.SKIPPED_ECHO)

        log.info("reconcile_started", message=f"Syncing {namespace}/{name}")
        spec = bw_secret.spec

        # Auth token
        try:
            auth_secret = self._secrets.get(namespace, spec.auth_token.secret_name)
        except KubernetesError as e:
            return self._fail(bw_secret, log, "Error pulling authorization token secret", e)

        raw_token = auth_secret.get_value(spec.auth_token.secret_key)
        if raw_token is None:
            return self._fail(
                bw_secret,
                log,
                "Error pulling authorization token secret",
                KeyError(
                    f"key '{spec.auth_token.secret_key}' not found in Secret "
                    f"'{spec.auth_token.secret_name}'"
                ),
            )
        try:
            access_token = raw_token.decode("utf-8")
        except UnicodeDecodeError as e:
            return self._fail(bw_secret, log, "Error decoding authorization token", e)

        # Delta pull
        try:
            delta = pull_secret_deltas(
                self._client_factory,
                spec.organization_id,
                access_token,
                bw_secret.status.last_successful_sync_time,
                self._state_path,
            )
        except BitwardenError as e:
            return self._fail(
                bw_secret,
                log,
                "Error pulling Secret Manager secrets from API => "
                f"API: {self._client_factory.get_api_url()} -- "
                f"Identity: {self._client_factory.get_identity_api_url()} -- "
                f"State: {self._state_path} -- "
                f"OrgId: {spec.organization_id}",
                e,
            )

        if not should_apply_delta(delta):
            message = f"No changes to {namespace}/{name}. Skipping sync."
            log.info("no_changes")
            self._complete(bw_secret, log, message)
            return ReconcileResult(ReconcileOutcome.NO_CHANGES, self._requeue_after, message)

        # Target secret
        try:
            secret = self._secrets.get(namespace, spec.secret_name)
        except KubernetesNotFoundError:
            secret = create_k8s_secret(bw_secret)
            try:
                set_controller_reference(bw_secret, secret)
            except OwnerReferenceError as e:
                return self._fail(bw_secret, log, "Failed to set controller reference", e)
            try:
                secret = self._secrets.create(secret)
            except KubernetesError as e:
                return self._fail(bw_secret, log, "Creation of K8s secret failed.", e)
        except KubernetesError as e:
            return self._fail(bw_secret, log, f"Error reading K8s secret {spec.secret_name}", e)

        try:
            restore_source_keys(secret)
        except ValueError as e:
            return self._fail(
                bw_secret,
                log,
                f"Error reading {CUSTOM_MAP_ANNOTATION} annotation of {spec.secret_name}",
                e,
            )

        update_secret_values(secret, delta.values)
        apply_secret_map(bw_secret, secret)

        try:
            set_k8s_secret_annotations(bw_secret, secret, self._clock.now())
        except SecretMapSerializationError as e:
            return self._fail(
                bw_secret, log, f"Error setting annotations for {namespace}/{name}", e
            )

        try:
            self._secrets.update(secret)
        except KubernetesError as e:
            return self._fail(bw_secret, log, f"Failed to update {namespace}/{name}", e)

        message = f"Completed sync for {namespace}/{name}"
        self._complete(bw_secret, log, message)
        return ReconcileResult(ReconcileOutcome.SYNCED, self._requeue_after, message)

    # =========================================================================
    # Status Recording
    # =========================================================================

    def _fail(
        self,
        bw_secret: BitwardenSecret,
        log: structlog.BoundLogger,
        message: str,
        error: Exception,
    ) -> ReconcileResult:
        """Record ``FailedSync`` and request a retry after the refresh interval."""
        full_message = f"{message} - {error}"
        log.error("sync_failed", message=message, error=str(error))

        bw_secret.set_condition(
            ConditionType.FAILED_SYNC,
            status=False,
            reason=ConditionReason.FAILED,
            message=full_message,
            now=self._clock.now(),
        )
        self._write_status(bw_secret, log)
        return ReconcileResult(ReconcileOutcome.FAILED, self._requeue_after, full_message)

    def _complete(
        self,
        bw_secret: BitwardenSecret,
        log: structlog.BoundLogger,
        message: str,
    ) -> None:
        """Record ``SuccessfulSync`` and advance the sync watermark."""
        now = self._clock.now()
        log.info("sync_completed", message=message)

        bw_secret.status.last_successful_sync_time = next_sync_watermark(
            bw_secret.status.last_successful_sync_time, now
        )
        bw_secret.set_condition(
            ConditionType.SUCCESSFUL_SYNC,
            status=True,
            reason=ConditionReason.COMPLETE,
            message=message,
            now=now,
        )
        self._write_status(bw_secret, log)

    def _write_status(self, bw_secret: BitwardenSecret, log: structlog.BoundLogger) -> None:
        # Conditions are observability only; the next poll rewrites them
        try:
            self._bitwarden_secrets.update_status(bw_secret)
        except KubernetesError as e:
            log.warning("status_update_failed", error=str(e))
