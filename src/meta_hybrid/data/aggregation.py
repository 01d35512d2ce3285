"""Status snapshot aggregation.

Runs the four host probes, applies a fallback to any probe that fails, and
assembles one immutable StatusSnapshot from the settled results.
"""

from __future__ import annotations

import datetime as dt
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import (
    BUILTIN_PARTITIONS,
    UNKNOWN,
    FieldState,
    StatusSnapshot,
    StorageState,
    SystemInfo,
)
from .normalization import (
    resolve_active_partitions,
    storage_label,
    tally_modes,
    union_partitions,
)
from ..collectors import (
    ActiveMountCollector,
    BaseCollector,
    ModuleCollector,
    StorageCollector,
    SystemInfoCollector,
)
from ..server.config import DEFAULT_MOUNT_SOURCE, Config


def _log(msg: str) -> None:
    print(msg, flush=True)


class StatusAggregator:
    """Builds StatusSnapshots from the host probes.

    Probes touch disjoint resources, so they are fanned out on a thread pool;
    the snapshot is assembled only once every probe has settled.
    """

    def __init__(
        self,
        config: Config,
        *,
        storage: Optional[BaseCollector] = None,
        mounts: Optional[BaseCollector] = None,
        system: Optional[BaseCollector] = None,
        modules: Optional[BaseCollector] = None,
        concurrent: bool = True,
    ):
        self.config = config
        self.storage = storage or StorageCollector(config.mount_base, timeout=config.probe_timeout)
        self.mounts = mounts or ActiveMountCollector(config.mountsource or DEFAULT_MOUNT_SOURCE)
        self.system = system or SystemInfoCollector(config.mount_base, timeout=config.probe_timeout)
        self.modules = modules or ModuleCollector(config.moduledir, config.rules_dir)
        self.concurrent = concurrent

    def candidate_partitions(self) -> Tuple[str, ...]:
        return union_partitions(BUILTIN_PARTITIONS, self.config.partitions)

    def collector_status(self) -> List[Dict[str, Any]]:
        """Availability of each probe on this host."""
        return [c.get_status() for c in (self.storage, self.mounts, self.system, self.modules)]

    def compute_snapshot(self) -> StatusSnapshot:
        """Sample every probe and return a fresh snapshot."""
        mount_base = self.config.mount_base
        probes: Dict[str, Tuple[Callable[[], Any], Any]] = {
            "storage": (self.storage.collect, StorageState()),
            "partitions": (self.mounts.collect, []),
            "system": (self.system.collect, SystemInfo(UNKNOWN, UNKNOWN, mount_base)),
            "modules": (self.modules.collect, []),
        }

        if self.concurrent:
            with ThreadPoolExecutor(max_workers=len(probes), thread_name_prefix="status-probe") as pool:
                futures = {
                    name: pool.submit(self._run_probe, name, fn, fallback)
                    for name, (fn, fallback) in probes.items()
                }
                settled = {name: future.result() for name, future in futures.items()}
        else:
            settled = {
                name: self._run_probe(name, fn, fallback)
                for name, (fn, fallback) in probes.items()
            }

        field_states = {name: state for name, (_, state, _) in settled.items()}
        errors = {name: err for name, (_, _, err) in settled.items() if err}

        storage: StorageState = settled["storage"][0]
        candidates = self.candidate_partitions()

        return StatusSnapshot(
            storage=storage,
            system=settled["system"][0],
            mode_stats=tally_modes(settled["modules"][0]),
            active_partitions=resolve_active_partitions(candidates, settled["partitions"][0]),
            candidate_partitions=candidates,
            storage_label=storage_label(storage, mount_base),
            field_states=field_states,
            errors=errors,
            generated_at=dt.datetime.now(dt.timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z",
        )

    @staticmethod
    def _run_probe(name: str, fn: Callable[[], Any], fallback: Any) -> Tuple[Any, FieldState, Optional[str]]:
        """Run one probe; any failure degrades to the fallback value."""
        try:
            return fn(), FieldState.READY, None
        except Exception as e:
            _log(f"[status] {name} probe failed, using fallback: {e}")
            return fallback, FieldState.ERROR, str(e)
