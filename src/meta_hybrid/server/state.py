"""Snapshot slot and refresh coordination.

StatusState is the context object shared by everything that displays status.
Refresh is pull-based: nothing here polls in the background.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional, Tuple

from ..data.aggregation import StatusAggregator
from ..data.models import SNAPSHOT_FIELDS, FieldState, StatusSnapshot


def _log(msg: str) -> None:
    """Print with flush for reliable output from server threads."""
    print(msg, flush=True)


class StatusState:
    """Holds the latest published snapshot.

    Refreshes are serialised by a lock so two probe cycles never write into
    the same slot; the slot itself is swapped under a second lock.
    """

    def __init__(self, aggregator: StatusAggregator):
        self.aggregator = aggregator
        self._snapshot: Optional[StatusSnapshot] = None
        self._last_error: Optional[str] = None
        self._last_refresh_ts: Optional[float] = None
        self._snapshot_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._is_loading = False

    @property
    def config(self):
        return self.aggregator.config

    @property
    def loading(self) -> bool:
        return self._is_loading

    def refresh(self, *, blocking: bool = True) -> Tuple[bool, str]:
        """Build a new snapshot and publish it.

        Args:
            blocking: If True, wait behind an in-flight refresh; if False,
                return immediately when one is already running

        Returns:
            Tuple of (success, message)
        """
        if not self._refresh_lock.acquire(blocking=blocking):
            return False, "Refresh already in progress."
        try:
            self._is_loading = True
            snapshot = self.aggregator.compute_snapshot()
            with self._snapshot_lock:
                self._snapshot = snapshot
                self._last_error = None
                self._last_refresh_ts = time.time()
            if snapshot.degraded:
                failed = ", ".join(sorted(snapshot.errors))
                return True, f"Refreshed with fallbacks: {failed}"
            return True, "Refreshed."
        except Exception as exc:
            _log(f"[status] Refresh failed: {exc}")
            with self._snapshot_lock:
                self._last_error = str(exc)
            return False, f"Refresh failed: {exc}"
        finally:
            self._is_loading = False
            self._refresh_lock.release()

    def snapshot(self) -> Tuple[Optional[StatusSnapshot], Optional[str], Optional[float]]:
        """Get current state snapshot.

        Returns:
            Tuple of (snapshot, last_error, last_refresh_timestamp)
        """
        with self._snapshot_lock:
            return self._snapshot, self._last_error, self._last_refresh_ts

    def field_states(self) -> Dict[str, FieldState]:
        """Per-field readiness, LOADING everywhere until the first publish."""
        snapshot, _, _ = self.snapshot()
        if snapshot is None:
            return {name: FieldState.LOADING for name in SNAPSHOT_FIELDS}
        return dict(snapshot.field_states)

    def get_status(self) -> Dict[str, Any]:
        """Get status payload for API responses."""
        snapshot, last_error, last_refresh_ts = self.snapshot()
        if snapshot is None:
            return {
                "meta": {
                    "status": "error" if last_error and not self._is_loading else "loading",
                    "error": last_error,
                    "field_states": {k: v.value for k, v in self.field_states().items()},
                    "last_refresh_epoch": last_refresh_ts,
                },
            }
        payload = snapshot.to_dict()
        payload["meta"]["status"] = "loading" if self._is_loading else "ready"
        payload["meta"]["last_refresh_epoch"] = last_refresh_ts
        return payload

    def is_ready(self) -> bool:
        """Check if a snapshot has been published."""
        return self._snapshot is not None
