"""Data models for meta-hybrid status reporting.

This module defines the core data structures handed from the probes to the
presentation layer, following these semantic principles:

1. DERIVED, NOT STORED
   - Storage percentages are computed from used/size on access
   - A snapshot never carries two independently sampled copies of one fact

2. EXPLICIT UNITS
   - Storage: bytes (integers)
   - Counts: modules (integers)

3. CLOSED ENUMERATIONS WITH A FALLBACK
   - Storage type: TMPFS, EXT4, UNKNOWN
   - Module mode: AUTO, MAGIC, UNRECOGNIZED
   - Field state: READY, LOADING, ERROR

Snapshots are frozen; a refresh builds a new one rather than patching fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# Partitions the installer knows how to relocate, in processing order.
BUILTIN_PARTITIONS: Tuple[str, ...] = (
    "system",
    "vendor",
    "product",
    "system_ext",
    "odm",
    "oem",
    "apex",
)

UNKNOWN = "unknown"


# =============================================================================
# Enumerations
# =============================================================================


class StorageType(str, Enum):
    """Backing store of the mount base."""

    TMPFS = "tmpfs"  # RAM backed, capacity is not physical pressure
    EXT4 = "ext4"  # Loop-mounted ext4 image
    UNKNOWN = "unknown"  # Probe failed or unsupported filesystem


class StorageHealthStatus(str, Enum):
    """Health status of the backing store."""

    HEALTHY = "HEALTHY"  # Usage below warning threshold (<80%)
    WARNING = "WARNING"  # Usage elevated (80-95%)
    CRITICAL = "CRITICAL"  # Nearly full (>95%)


class ModuleMode(str, Enum):
    """How a sub-module was selected for mounting."""

    AUTO = "auto"
    MAGIC = "magic"
    UNRECOGNIZED = "unrecognized"


class FieldState(str, Enum):
    """Per-field readiness exposed to presentation layers."""

    READY = "ready"
    LOADING = "loading"
    ERROR = "error"


# Snapshot fields sourced from independent probes.
SNAPSHOT_FIELDS: Tuple[str, ...] = ("storage", "partitions", "system", "modules")


# =============================================================================
# Probe results
# =============================================================================


@dataclass(frozen=True)
class StorageState:
    """Point-in-time read of the backing store.

    Units:
    - used, size: bytes (int)
    """

    type: StorageType = StorageType.UNKNOWN
    used: int = 0  # Unit: bytes
    size: int = 0  # Unit: bytes

    @property
    def percent_used(self) -> float:
        """Usage as a percentage 0-100, 0.0 when size is unknown."""
        if self.size <= 0:
            return 0.0
        return (self.used / self.size) * 100

    @property
    def percent(self) -> str:
        """Usage formatted for display, e.g. '42%'."""
        return f"{self.percent_used:.0f}%"

    @property
    def status(self) -> StorageHealthStatus:
        """Return status based on usage percentage."""
        if self.percent_used >= 95:
            return StorageHealthStatus.CRITICAL
        elif self.percent_used >= 80:
            return StorageHealthStatus.WARNING
        return StorageHealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "used": self.used,
            "size": self.size,
            "percent": self.percent,
            "status": self.status.value.lower(),
        }


@dataclass(frozen=True)
class SystemInfo:
    """Host facts read once per aggregation cycle."""

    kernel: str = UNKNOWN
    selinux: str = UNKNOWN  # 'Enforcing', 'Permissive', 'Disabled'
    mount_base: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kernel": self.kernel,
            "selinux": self.selinux,
            "mount_base": self.mount_base,
        }


@dataclass(frozen=True)
class ModuleEntry:
    """A loaded sub-module and its raw mode tag."""

    id: str
    mode: str  # Raw tag from the module's rules; parsed by normalization


@dataclass(frozen=True)
class ModuleModeStats:
    """Count of loaded sub-modules per mode.

    Not a partition of the module set: modules with an unrecognized tag only
    land in ``unrecognized``.
    """

    auto: int = 0
    magic: int = 0
    unrecognized: int = 0

    def __post_init__(self):
        for name in ("auto", "magic", "unrecognized"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} count must be non-negative")

    @property
    def recognized(self) -> int:
        return self.auto + self.magic

    def to_dict(self) -> Dict[str, int]:
        return {
            "auto": self.auto,
            "magic": self.magic,
            "unrecognized": self.unrecognized,
        }


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class StatusSnapshot:
    """Everything the presentation layer needs for one refresh.

    - candidate_partitions: built-in partitions plus configured ones, in
      display order
    - active_partitions: the subset currently mounted, in the same order
    - field_states / errors: keyed by SNAPSHOT_FIELDS
    """

    storage: StorageState
    system: SystemInfo
    mode_stats: ModuleModeStats
    active_partitions: Tuple[str, ...]
    candidate_partitions: Tuple[str, ...]
    storage_label: str
    field_states: Dict[str, FieldState] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    generated_at: Optional[str] = None  # ISO timestamp

    def is_active(self, partition: str) -> bool:
        return partition in self.active_partitions

    def partition_rows(self) -> List[Dict[str, Any]]:
        """Every candidate partition with its active flag, in display order."""
        return [
            {"name": name, "active": self.is_active(name)}
            for name in self.candidate_partitions
        ]

    @property
    def degraded(self) -> bool:
        """True if any probe fell back to its default."""
        return any(state == FieldState.ERROR for state in self.field_states.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to the JSON payload served by the API."""
        return {
            "meta": {
                "generated_at": self.generated_at,
                "degraded": self.degraded,
                "field_states": {k: v.value for k, v in self.field_states.items()},
                "errors": dict(self.errors),
            },
            "storage": {**self.storage.to_dict(), "label": self.storage_label},
            "system": self.system.to_dict(),
            "modules": self.mode_stats.to_dict(),
            "partitions": self.partition_rows(),
            "active_partitions": list(self.active_partitions),
        }
