"""Pytest configuration and shared fixtures."""

import json
import pytest
from pathlib import Path

from meta_hybrid.collectors.base import BaseCollector
from meta_hybrid.data.aggregation import StatusAggregator
from meta_hybrid.data.models import ModuleEntry, StorageState, StorageType, SystemInfo
from meta_hybrid.server.config import Config


@pytest.fixture
def sample_proc_mounts():
    """Sample /proc/mounts with module mounts tagged KSU."""
    return '''\
/dev/block/dm-0 / ext4 ro,seclabel,relatime 0 0
tmpfs /dev tmpfs rw,seclabel,nosuid,relatime,mode=755 0 0
tmpfs /debug_ramdisk tmpfs rw,seclabel,relatime,mode=755 0 0
/dev/block/dm-3 /vendor ext4 ro,seclabel,relatime 0 0
KSU /system/app overlay ro,seclabel,relatime,lowerdir=/debug_ramdisk/a 0 0
KSU /vendor/etc overlay ro,seclabel,relatime,lowerdir=/debug_ramdisk/b 0 0
KSU /my_custom overlay ro,seclabel,relatime 0 0
KSU /system/bin overlay ro,seclabel,relatime 0 0
magisk /product/app tmpfs rw,seclabel 0 0
/dev/block/loop7 /data/adb/meta-hybrid/mnt ext4 rw,seclabel,relatime 0 0
/dev/block/dm-9 /mnt/with\\040space ext4 rw 0 0
'''


@pytest.fixture
def sample_df_output():
    """Sample output from df -k."""
    return '''\
Filesystem     1K-blocks  Used Available Use% Mounted on
tmpfs            3840000 96000   3744000   3% /debug_ramdisk
'''


@pytest.fixture
def sample_df_output_wrapped():
    """Sample df -k output where a long filesystem name wraps."""
    return '''\
Filesystem     1K-blocks  Used Available Use% Mounted on
/dev/block/loop-device-with-a-very-long-name
                  2048000 512000   1536000  25% /data/adb/meta-hybrid/mnt
'''


@pytest.fixture
def make_module():
    """Factory for module directories under a modules root."""

    def _make(modules_root: Path, module_id: str, *, rules=None, user_rules_dir=None,
              user_rules=None, markers=()):
        module_dir = modules_root / module_id
        module_dir.mkdir(parents=True)
        (module_dir / "module.prop").write_text(f"id={module_id}\n")
        if rules is not None:
            (module_dir / "hybrid_rules.json").write_text(
                rules if isinstance(rules, str) else json.dumps(rules)
            )
        if user_rules is not None and user_rules_dir is not None:
            user_rules_dir.mkdir(parents=True, exist_ok=True)
            (user_rules_dir / f"{module_id}.json").write_text(json.dumps(user_rules))
        for marker in markers:
            (module_dir / marker).touch()
        return module_dir

    return _make


@pytest.fixture
def staged_module(tmp_path):
    """Staging root with system/{vendor,product}, product symlinked."""
    root = tmp_path / "module"
    (root / "system" / "vendor" / "etc").mkdir(parents=True)
    (root / "system" / "vendor" / "etc" / "hosts").write_text("127.0.0.1 localhost\n")
    product_target = tmp_path / "product_real"
    product_target.mkdir()
    (root / "system" / "product").symlink_to(product_target, target_is_directory=True)
    return root


class StubCollector(BaseCollector):
    """Collector returning a fixed value or raising."""

    def __init__(self, name, value=None, error=None, gate=None):
        self._name = name
        self.value = value
        self.error = error
        self.gate = gate
        self.calls = 0

    @property
    def name(self):
        return self._name

    @property
    def display_name(self):
        return self._name.title()

    def is_available(self):
        return True

    def collect(self):
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture
def stub_collector():
    return StubCollector


@pytest.fixture
def make_aggregator():
    """Factory for aggregators wired to stub probes."""

    def _make(config=None, **overrides):
        collectors = {
            "storage": StubCollector("storage", StorageState(StorageType.TMPFS, 100, 400)),
            "mounts": StubCollector("partitions", ["vendor", "system", "data"]),
            "system": StubCollector("system", SystemInfo("6.1.0", "Enforcing", "/debug_ramdisk")),
            "modules": StubCollector("modules", [
                ModuleEntry("a", "auto"),
                ModuleEntry("b", "magic"),
                ModuleEntry("c", "hymofs"),
            ]),
        }
        collectors.update(overrides)
        return StatusAggregator(config or Config(), **collectors)

    return _make
