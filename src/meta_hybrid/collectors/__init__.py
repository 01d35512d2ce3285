"""Host probes - storage, mounts, system facts, and module inventory."""

from .base import BaseCollector, CollectorError
from .modules import ModuleCollector, ModuleRules
from .mounts import ActiveMountCollector
from .storage import StorageCollector
from .system import SystemInfoCollector

__all__ = [
    "BaseCollector",
    "CollectorError",
    "ModuleCollector",
    "ModuleRules",
    "ActiveMountCollector",
    "StorageCollector",
    "SystemInfoCollector",
]
