"""Hybrid mount layout relocation.

Module zips stage partition content as ``<module>/system/<partition>``. The
hybrid layout wants each partition as a sibling, ``<module>/<partition>``, so
the mount engine can handle them without extra symlink mounts.
Symlinked partitions are left where they are: the module manager resolves
those itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..data.models import BUILTIN_PARTITIONS

SYSTEM_DIR = "system"


class RelocationError(Exception):
    """Fatal install error: a partition could not be relocated."""

    def __init__(self, partition: str, reason: str, cause: Optional[Exception] = None, *, action: str = "relocate"):
        self.partition = partition
        self.reason = reason
        self.cause = cause
        super().__init__(f"failed to {action} /{partition}: {reason}")


@dataclass
class RelocationResult:
    """What relocate() did to each candidate partition."""

    moved: List[str] = field(default_factory=list)
    kept_symlinks: List[str] = field(default_factory=list)
    absent: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # Present but not a directory
    system_removed: bool = False


def relocate(
    module_root: Union[str, Path],
    partitions: Iterable[str] = BUILTIN_PARTITIONS,
    echo: Optional[Callable[[str], None]] = print,
) -> RelocationResult:
    """Move ``system/<partition>`` directories up to ``<partition>``.

    Partitions are processed strictly in the given order. An existing
    destination is a collision and aborts the install; nothing is rolled
    back.

    Raises:
        RelocationError: on collision or any filesystem error.
    """
    root = Path(module_root)
    system_dir = root / SYSTEM_DIR
    result = RelocationResult()

    for name in partitions:
        source = system_dir / name
        if source.is_symlink():
            result.kept_symlinks.append(name)
            continue
        if not source.exists():
            result.absent.append(name)
            continue
        if not source.is_dir():
            result.skipped.append(name)
            continue

        destination = root / name
        if destination == system_dir:
            # system/system already sits under its own sibling path
            result.skipped.append(name)
            continue
        if os.path.lexists(destination):
            raise RelocationError(name, f"destination {destination} already exists")
        try:
            source.rename(destination)
        except OSError as e:
            raise RelocationError(name, e.strerror or str(e), e) from e
        result.moved.append(name)
        if echo:
            echo(f"- handled /{name}")

    result.system_removed = _remove_if_empty(system_dir)
    return result


def _remove_if_empty(system_dir: Path) -> bool:
    if system_dir.is_symlink() or not system_dir.is_dir():
        return False
    try:
        if any(system_dir.iterdir()):
            return False
        system_dir.rmdir()
    except OSError as e:
        raise RelocationError(SYSTEM_DIR, e.strerror or str(e), e, action="remove empty staging dir") from e
    return True
