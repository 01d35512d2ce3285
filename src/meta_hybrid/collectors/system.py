"""Host facts collector: kernel release and SELinux mode."""

from __future__ import annotations

import os
import subprocess
from typing import Optional

from .base import BaseCollector, CollectorError
from ..data.models import UNKNOWN, SystemInfo

SELINUX_ENFORCE_FILE = "/sys/fs/selinux/enforce"

SELINUX_MODE_MAP = {
    "1": "Enforcing",
    "0": "Permissive",
}


class SystemInfoCollector(BaseCollector):
    """Collector for kernel version and SELinux enforcement."""

    def __init__(self, mount_base: str, enforce_file: str = SELINUX_ENFORCE_FILE, timeout: int = 5):
        self.mount_base = mount_base
        self.enforce_file = enforce_file
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "system"

    @property
    def display_name(self) -> str:
        return "System"

    def is_available(self) -> bool:
        return hasattr(os, "uname")

    def collect(self) -> SystemInfo:
        try:
            kernel = os.uname().release
        except (AttributeError, OSError) as e:
            raise CollectorError(self.name, "cannot read kernel release", e) from e
        return SystemInfo(
            kernel=kernel or UNKNOWN,
            selinux=self._get_selinux(),
            mount_base=self.mount_base,
        )

    def _get_selinux(self) -> str:
        """Read SELinux mode from selinuxfs, then getenforce."""
        try:
            with open(self.enforce_file, "r", encoding="utf-8") as f:
                value = f.read().strip()
            return SELINUX_MODE_MAP.get(value, UNKNOWN)
        except OSError:
            pass
        return self._run_getenforce() or UNKNOWN

    def _run_getenforce(self) -> Optional[str]:
        try:
            result = subprocess.run(
                ["getenforce"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired):
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
