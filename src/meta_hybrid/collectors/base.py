"""Base collector interface for host probes."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


DEFAULT_MOUNTS_FILE = "/proc/mounts"


class BaseCollector(ABC):
    """Abstract base class for host probes.

    All collectors must implement this interface so the aggregator can run
    them side by side and fall back uniformly when one fails.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this collector.

        Returns:
            A short, lowercase identifier (e.g., 'storage', 'mounts')
        """
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for UI display.

        Returns:
            A user-friendly name (e.g., 'Storage', 'Active Partitions')
        """
        pass

    @abstractmethod
    def collect(self) -> Any:
        """Sample current state from the host.

        Returns:
            The probe's model object. Type varies by collector.

        Raises:
            CollectorError: If the probe fails.
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this collector can run on this host.

        Returns:
            True if the collector can operate, False otherwise.
        """
        pass

    def get_status(self) -> Dict[str, Any]:
        """Get collector status information.

        Returns:
            Dictionary with status details including availability.
        """
        return {
            "name": self.name,
            "display_name": self.display_name,
            "available": self.is_available(),
        }


class CollectorError(Exception):
    """Exception raised when a collector fails to collect data."""

    def __init__(self, collector_name: str, message: str, cause: Optional[Exception] = None):
        self.collector_name = collector_name
        self.cause = cause
        super().__init__(f"[{collector_name}] {message}")


def read_mounts(mounts_file: str = DEFAULT_MOUNTS_FILE) -> List[Dict[str, str]]:
    """Parse a /proc/mounts style table.

    Octal escapes in paths (``\\040`` for space) are decoded.
    """
    with open(mounts_file, "r", encoding="utf-8") as f:
        content = f.read()
    return parse_mounts(content)


def parse_mounts(content: str) -> List[Dict[str, str]]:
    mounts = []
    for line in content.splitlines():
        parts = line.split()
        if len(parts) < 3:
            continue
        mounts.append({
            "source": _unescape(parts[0]),
            "target": _unescape(parts[1]),
            "fstype": parts[2],
        })
    return mounts


def _unescape(value: str) -> str:
    return (
        value.replace("\\040", " ")
        .replace("\\011", "\t")
        .replace("\\012", "\n")
        .replace("\\134", "\\")
    )
