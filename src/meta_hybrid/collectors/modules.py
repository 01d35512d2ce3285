"""Module inventory collector.

Scans the module directory for enabled sub-modules and resolves the mount
mode each one asked for. A module's mode comes from the last rules file
that parses:

1. ``<module>/hybrid_rules.json`` shipped by the module author
2. ``<rules_dir>/<module id>.json`` written by the user

A rules file without ``default_mode`` means ``auto``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .base import BaseCollector, CollectorError
from ..data.models import ModuleEntry

DEFAULT_MODE = "auto"

IGNORED_MODULE_IDS = {"meta-hybrid", "lost+found", ".git"}
MARKER_FILES = ("disable", "remove", "skip_mount")

MODULE_RULES_FILE = "hybrid_rules.json"


@dataclass
class ModuleRules:
    """Mount mode a module asked for."""

    default_mode: str = DEFAULT_MODE

    @classmethod
    def load(cls, module_dir: Path, module_id: str, rules_dir: Optional[Path] = None) -> "ModuleRules":
        rules = cls()
        rules._merge_json(module_dir / MODULE_RULES_FILE)
        if rules_dir is not None:
            rules._merge_json(rules_dir / f"{module_id}.json")
        return rules

    def _merge_json(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as e:
            print(f"[modules] Ignoring unreadable rules {path}: {e}", flush=True)
            return
        if not isinstance(data, dict):
            return
        mode = data.get("default_mode")
        if isinstance(mode, str) and mode.strip():
            self.default_mode = mode.strip().lower()
        else:
            self.default_mode = DEFAULT_MODE


class ModuleCollector(BaseCollector):
    """Collector for enabled sub-modules and their modes."""

    def __init__(self, module_dir: str, rules_dir: Optional[str] = None):
        self.module_dir = Path(module_dir)
        self.rules_dir = Path(rules_dir) if rules_dir else None

    @property
    def name(self) -> str:
        return "modules"

    @property
    def display_name(self) -> str:
        return "Modules"

    def is_available(self) -> bool:
        return self.module_dir.is_dir()

    def collect(self) -> List[ModuleEntry]:
        """Return enabled modules sorted by id.

        A missing module directory means no modules, not a failure.
        """
        if not self.module_dir.exists():
            return []
        try:
            children = list(self.module_dir.iterdir())
        except OSError as e:
            raise CollectorError(self.name, f"cannot list {self.module_dir}", e) from e

        modules = []
        for path in children:
            if not self._is_enabled(path):
                continue
            rules = ModuleRules.load(path, path.name, self.rules_dir)
            modules.append(ModuleEntry(id=path.name, mode=rules.default_mode))
        return sorted(modules, key=lambda m: m.id)

    def _is_enabled(self, path: Path) -> bool:
        if not path.is_dir() or path.name in IGNORED_MODULE_IDS:
            return False
        return not any((path / marker).exists() for marker in MARKER_FILES)
