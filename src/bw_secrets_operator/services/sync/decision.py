"""Decisions taken before any write: echo suppression and whether to apply a delta."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bw_secrets_operator.services.sync.delta import SyncDelta

# Status writes come back as watch events almost immediately
ECHO_GUARD_WINDOW = timedelta(seconds=1)


def is_status_echo(
    last_successful_sync_time: datetime | None,
    now: datetime,
    window: timedelta = ECHO_GUARD_WINDOW,
) -> bool:
    """Return True when ``now`` falls inside the guard window after the last sync.

    Such an invocation was triggered by the operator's own status update and
    must not pull or write anything.
    """
    if last_successful_sync_time is None:
        return False
    return now < last_successful_sync_time + window


def should_apply_delta(delta: SyncDelta) -> bool:
    """Only deltas reporting changes touch the target Secret."""
    return delta.has_changes


def next_sync_watermark(previous: datetime | None, now: datetime) -> datetime:
    """Watermark to record after a successful loop; never moves backwards."""
    if previous is not None and previous > now:
        return previous
    return now
