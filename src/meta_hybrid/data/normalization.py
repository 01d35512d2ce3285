"""Normalization of raw probe output into the snapshot vocabulary.

Key normalizations:
1. Partition lists → Ordered, duplicate-free candidate set
2. Mounted partitions → Subset of the candidate set
3. Filesystem types → StorageType
4. Module mode tags → ModuleMode (unknown tags never raise)
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .models import (
    ModuleEntry,
    ModuleMode,
    ModuleModeStats,
    StorageState,
    StorageType,
)


# =============================================================================
# Mode Normalization Mappings
# =============================================================================

# Raw mode tags → normalized modes. 'overlay' is what 'auto' resolves to at
# mount time, 'tmpfs' is the legacy spelling of magic mount.
MODULE_MODE_MAP = {
    "auto": ModuleMode.AUTO,
    "overlay": ModuleMode.AUTO,
    "magic": ModuleMode.MAGIC,
    "tmpfs": ModuleMode.MAGIC,
}

# Kernel filesystem names → storage types
FSTYPE_MAP = {
    "tmpfs": StorageType.TMPFS,
    "ramfs": StorageType.TMPFS,
    "ext4": StorageType.EXT4,
}

EXT4_LABEL = "ext4 image"


# =============================================================================
# Partitions
# =============================================================================


def union_partitions(builtin: Iterable[str], configured: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Merge built-in and configured partition names.

    Built-in order comes first, then newly introduced configured names in
    their given order. Duplicates and blank names are dropped.

    >>> union_partitions(["system", "vendor"], ["vendor", "custom"])
    ('system', 'vendor', 'custom')
    """
    merged: List[str] = []
    for name in list(builtin) + list(configured or []):
        name = (name or "").strip()
        if name and name not in merged:
            merged.append(name)
    return tuple(merged)


def resolve_active_partitions(candidates: Iterable[str], reported: Iterable[str]) -> Tuple[str, ...]:
    """Return the candidates reported active, in candidate order.

    Reported names outside the candidate set are dropped.
    """
    reported_set = {name.strip() for name in reported if name}
    return tuple(name for name in candidates if name in reported_set)


# =============================================================================
# Storage
# =============================================================================


def normalize_storage_type(fstype: Optional[str]) -> StorageType:
    """Map a kernel filesystem name to a StorageType."""
    if not fstype:
        return StorageType.UNKNOWN
    return FSTYPE_MAP.get(fstype.strip().lower(), StorageType.UNKNOWN)


def storage_label(storage: StorageState, mount_base: str) -> str:
    """Return the storage line shown to operators.

    tmpfs capacity says nothing about physical pressure, so tmpfs reports
    the mount base path instead.
    """
    if storage.type == StorageType.TMPFS:
        return mount_base
    if storage.type == StorageType.EXT4:
        return EXT4_LABEL
    return StorageType.UNKNOWN.value


# =============================================================================
# Modules
# =============================================================================


def parse_module_mode(raw: Optional[str]) -> ModuleMode:
    """Normalize a raw mode tag, falling back to UNRECOGNIZED."""
    if not isinstance(raw, str):
        return ModuleMode.UNRECOGNIZED
    return MODULE_MODE_MAP.get(raw.strip().lower(), ModuleMode.UNRECOGNIZED)


def tally_modes(modules: Iterable[ModuleEntry]) -> ModuleModeStats:
    """Count modules per recognized mode."""
    auto = magic = unrecognized = 0
    for module in modules:
        mode = parse_module_mode(module.mode)
        if mode == ModuleMode.AUTO:
            auto += 1
        elif mode == ModuleMode.MAGIC:
            magic += 1
        else:
            unrecognized += 1
    return ModuleModeStats(auto=auto, magic=magic, unrecognized=unrecognized)
