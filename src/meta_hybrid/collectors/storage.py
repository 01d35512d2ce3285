"""Storage monitoring collector.

Reports the backing type and usage of the mount base that module content is
staged on at boot (a tmpfs or a loop-mounted ext4 image).
"""

from __future__ import annotations

import os
import subprocess
from typing import Dict, Optional

from .base import DEFAULT_MOUNTS_FILE, BaseCollector, CollectorError, read_mounts
from ..data.models import StorageState
from ..data.normalization import normalize_storage_type


class StorageCollector(BaseCollector):
    """Collector for mount base capacity.

    Uses /proc/mounts for the filesystem type and `df -k` for usage.
    """

    def __init__(self, mount_base: str, timeout: int = 10, mounts_file: str = DEFAULT_MOUNTS_FILE):
        self.mount_base = mount_base
        self.timeout = timeout
        self.mounts_file = mounts_file

    @property
    def name(self) -> str:
        return "storage"

    @property
    def display_name(self) -> str:
        return "Storage"

    def is_available(self) -> bool:
        """Check if the mount base exists."""
        return bool(self.mount_base) and os.path.isdir(self.mount_base)

    def collect(self) -> StorageState:
        """Collect storage type and usage of the mount base.

        Raises:
            CollectorError: If the mount base is missing or df fails.
        """
        if not self.is_available():
            raise CollectorError(self.name, f"mount base {self.mount_base!r} not found")

        fstype = self._get_fstype()
        df_info = self._get_df_info()
        if df_info is None:
            raise CollectorError(self.name, f"could not read usage of {self.mount_base}")

        return StorageState(
            type=normalize_storage_type(fstype),
            used=self._parse_kb(df_info.get("used", "0")),
            size=self._parse_kb(df_info.get("size", "0")),
        )

    def _get_fstype(self) -> Optional[str]:
        """Find the filesystem type of the longest mount point containing the base."""
        try:
            mounts = read_mounts(self.mounts_file)
        except OSError as e:
            raise CollectorError(self.name, f"cannot read {self.mounts_file}", e) from e

        base = os.path.normpath(self.mount_base)
        best: Optional[Dict[str, str]] = None
        for entry in mounts:
            target = os.path.normpath(entry["target"])
            if base == target or base.startswith(target.rstrip("/") + "/"):
                if best is None or len(target) >= len(best["target"]):
                    best = {**entry, "target": target}
        return best["fstype"] if best else None

    def _get_df_info(self) -> Optional[Dict[str, str]]:
        """Run df -k on the mount base and parse the output."""
        try:
            result = subprocess.run(
                ["df", "-k", self.mount_base],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CollectorError(self.name, f"timeout running df on {self.mount_base}", e) from e
        except OSError as e:
            raise CollectorError(self.name, f"cannot run df: {e}", e) from e
        if result.returncode != 0:
            return None
        return self._parse_df_output(result.stdout)

    def _parse_df_output(self, df_output: str) -> Optional[Dict[str, str]]:
        """Parse df -k output into structured data."""
        lines = df_output.strip().split("\n")
        if len(lines) < 2:
            return None

        # Handle wrapped lines (when filesystem name is long)
        data_line = lines[-1]
        if len(lines) > 2 and data_line[:1].isspace():
            prev = lines[-2].strip()
            if prev and not prev.startswith("Filesystem"):
                data_line = prev + " " + data_line

        parts = data_line.split()
        if len(parts) >= 5:
            return {
                "filesystem": parts[0],
                "size": parts[1],
                "used": parts[2],
                "available": parts[3],
                "percent_used": parts[4].rstrip("%"),
            }
        return None

    def _parse_kb(self, value: str) -> int:
        """Parse a df -k block count into bytes."""
        try:
            return int(value) * 1024
        except (TypeError, ValueError):
            return 0
