"""Data layer - models, normalization, and snapshot aggregation."""

from .models import (
    BUILTIN_PARTITIONS,
    FieldState,
    ModuleEntry,
    ModuleMode,
    ModuleModeStats,
    StatusSnapshot,
    StorageHealthStatus,
    StorageState,
    StorageType,
    SystemInfo,
)
from .normalization import (
    parse_module_mode,
    resolve_active_partitions,
    storage_label,
    tally_modes,
    union_partitions,
)

__all__ = [
    "BUILTIN_PARTITIONS",
    "FieldState",
    "ModuleEntry",
    "ModuleMode",
    "ModuleModeStats",
    "StatusSnapshot",
    "StorageHealthStatus",
    "StorageState",
    "StorageType",
    "SystemInfo",
    "parse_module_mode",
    "resolve_active_partitions",
    "storage_label",
    "tally_modes",
    "union_partitions",
]
