"""Active partition collector.

The mount engine tags every mount it makes with a configurable source name
(``mountsource``). Partitions with at least one such mount are active.
"""

from __future__ import annotations

from typing import List

from .base import DEFAULT_MOUNTS_FILE, BaseCollector, CollectorError, read_mounts


class ActiveMountCollector(BaseCollector):
    """Collector for partitions currently carrying module mounts."""

    def __init__(self, mount_source: str, mounts_file: str = DEFAULT_MOUNTS_FILE):
        self.mount_source = mount_source
        self.mounts_file = mounts_file

    @property
    def name(self) -> str:
        return "partitions"

    @property
    def display_name(self) -> str:
        return "Active Partitions"

    def is_available(self) -> bool:
        try:
            with open(self.mounts_file, "r", encoding="utf-8"):
                return True
        except OSError:
            return False

    def collect(self) -> List[str]:
        """Return partition names with module mounts, in mount table order."""
        if not self.mount_source:
            return []
        try:
            mounts = read_mounts(self.mounts_file)
        except OSError as e:
            raise CollectorError(self.name, f"cannot read {self.mounts_file}", e) from e

        active: List[str] = []
        for entry in mounts:
            if entry["source"] != self.mount_source:
                continue
            partition = self._partition_of(entry["target"])
            if partition and partition not in active:
                active.append(partition)
        return active

    @staticmethod
    def _partition_of(target: str) -> str:
        """Return the first path component of a mount target."""
        parts = [p for p in target.split("/") if p]
        return parts[0] if parts else ""
