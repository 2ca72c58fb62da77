"""Single-process controller driving the reconciler.

Watches BitwardenSecret objects and keeps a schedule of requested requeues.
All reconciles run on the calling thread, one at a time, which gives the
per-object serialization the reconciler relies on.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog

from bw_secrets_operator.integrations.kubernetes.exceptions import KubernetesError
from bw_secrets_operator.services.sync.clock import Clock, SystemClock
from bw_secrets_operator.services.sync.reconciler import ReconcileOutcome

if TYPE_CHECKING:
    from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
        BitwardenSecret,
    )
    from bw_secrets_operator.services.kubernetes.bitwarden_secret_manager import (
        BitwardenSecretManager,
    )
    from bw_secrets_operator.services.sync.reconciler import (
        BitwardenSecretReconciler,
        ReconcileResult,
    )

logger = structlog.get_logger()

ObjectKey = tuple[str, str]

# Kept under the default 30s pod termination grace period
DEFAULT_WATCH_TIMEOUT = 20
# Watch resourceVersion too old; a fresh list is needed
HTTP_GONE = 410


def _identity(func: Callable[..., Any]) -> Callable[..., Any]:
    return func


class SyncController:
    """Dispatches watch events and scheduled requeues to the reconciler."""

    def __init__(
        self,
        reconciler: BitwardenSecretReconciler,
        bitwarden_secrets: BitwardenSecretManager,
        *,
        namespace: str | None = None,
        watch_timeout: int = DEFAULT_WATCH_TIMEOUT,
        clock: Clock | None = None,
        retry_decorator: Callable[[Callable[..., Any]], Callable[..., Any]] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            reconciler: Reconciler invoked for every due object.
            bitwarden_secrets: Store used to list and watch declarations.
            namespace: Restrict to one namespace, None for all.
            watch_timeout: Upper bound in seconds of a single watch window.
            clock: Time source for the requeue schedule.
            retry_decorator: Wraps each watch window, typically
                ``KubernetesClient.make_retry_decorator()``.
        """
        self._reconciler = reconciler
        self._bitwarden_secrets = bitwarden_secrets
        self._namespace = namespace
        self._watch_timeout = watch_timeout
        self._clock = clock or SystemClock()
        self._due: dict[ObjectKey, datetime] = {}
        self._requeue_at: dict[ObjectKey, datetime] = {}
        self._generations: dict[ObjectKey, int | None] = {}
        self._resource_version: str | None = None
        self._stop = threading.Event()
        self._run_window = (retry_decorator or _identity)(self.run_once)
        self._log = logger.bind(namespace=namespace or "*")

    # =========================================================================
    # Scheduling
    # =========================================================================

    def enqueue(self, key: ObjectKey, after: timedelta = timedelta(0)) -> None:
        """Schedule ``key`` to reconcile no later than ``after`` from now."""
        due = self._clock.now() + after
        current = self._due.get(key)
        if current is None or due < current:
            self._due[key] = due

    def forget(self, key: ObjectKey) -> None:
        """Drop any scheduled reconcile of ``key``."""
        self._due.pop(key, None)
        self._requeue_at.pop(key, None)
        self._generations.pop(key, None)

    def pending(self) -> dict[ObjectKey, datetime]:
        """Snapshot of the schedule."""
        return dict(self._due)

    def process_due(self) -> int:
        """Reconcile every object whose due time has passed.

        Returns:
            Number of reconciles run.
        """
        processed = 0
        now = self._clock.now()
        for key, due in sorted(self._due.items(), key=lambda item: item[1]):
            if due > now or self._stop.is_set():
                break
            del self._due[key]
            self._dispatch(key)
            processed += 1
        return processed

    def _dispatch(self, key: ObjectKey) -> None:
        namespace, name = key
        result: ReconcileResult = self._reconciler.reconcile(namespace, name)
        self._log.debug(
            "reconciled",
            object=f"{namespace}/{name}",
            outcome=str(result.outcome),
            requeue_after=result.requeue_after.total_seconds() if result.requeue_after else None,
        )
        now = self._clock.now()
        if result.requeue_after is not None:
            self._due[key] = self._requeue_at[key] = now + result.requeue_after
        elif result.outcome == ReconcileOutcome.NOT_FOUND:
            self._requeue_at.pop(key, None)
        elif (requeue_at := self._requeue_at.get(key)) is not None:
            # An echo does not cancel the poll requested by the last real sync
            self._due[key] = max(requeue_at, now)

    def _seconds_until_next_due(self) -> int:
        if not self._due:
            return self._watch_timeout
        delta = (min(self._due.values()) - self._clock.now()).total_seconds()
        return max(1, min(self._watch_timeout, int(delta) + 1))

    # =========================================================================
    # Watch Handling
    # =========================================================================

    def handle_event(self, event_type: str, bw_secret: BitwardenSecret) -> None:
        """Queue reconciles for watch events.

        ``MODIFIED`` events that leave ``metadata.generation`` unchanged are
        status-only writes and are ignored; ``DELETED`` drops the object,
        the owner reference takes care of its Secret.
        """
        key: ObjectKey = (bw_secret.namespace or "", bw_secret.name)
        if bw_secret.resource_version:
            self._resource_version = bw_secret.resource_version

        if event_type == "DELETED":
            self._log.info("bitwarden_secret_removed", object=bw_secret.key)
            self.forget(key)
            return

        if (
            event_type == "MODIFIED"
            and key in self._generations
            and self._generations[key] == bw_secret.generation
        ):
            return

        self._generations[key] = bw_secret.generation
        self.enqueue(key)

    def _resync(self) -> None:
        bw_secrets, resource_version = self._bitwarden_secrets.list_all(self._namespace)
        for bw_secret in bw_secrets:
            key: ObjectKey = (bw_secret.namespace or "", bw_secret.name)
            self._generations[key] = bw_secret.generation
            self.enqueue(key)
        self._resource_version = resource_version
        self._log.info("listed_bitwarden_secrets", count=len(bw_secrets))

    def run_once(self) -> None:
        """Run one watch window, reconciling due objects as events arrive."""
        if self._resource_version is None:
            self._resync()
        self.process_due()
        if self._stop.is_set():
            return

        try:
            for event_type, bw_secret in self._bitwarden_secrets.watch(
                self._namespace,
                resource_version=self._resource_version,
                timeout_seconds=self._seconds_until_next_due(),
            ):
                self.handle_event(event_type, bw_secret)
                self.process_due()
                if self._stop.is_set():
                    break
        except KubernetesError as e:
            if e.status_code != HTTP_GONE:
                raise
            self._log.info("watch_expired_relisting")
            self._resource_version = None

        self.process_due()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def run(self) -> None:
        """Run until :meth:`stop` is called."""
        self._log.info("controller_started")
        while not self._stop.is_set():
            self._run_window()
        self._log.info("controller_stopped")

    def stop(self) -> None:
        """Ask :meth:`run` to return after the current watch window."""
        self._stop.set()
