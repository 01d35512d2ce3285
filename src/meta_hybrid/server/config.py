"""Configuration management for meta-hybrid.

Supports YAML-based configuration. Every key is optional; a missing file or
key falls back to the device defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

BASE_DIR = "/data/adb/meta-hybrid"

DEFAULT_MODULE_DIR = "/data/adb/modules"
DEFAULT_MOUNT_SOURCE = "KSU"
DEFAULT_TEMPDIR = "/debug_ramdisk"
DEFAULT_RULES_DIR = f"{BASE_DIR}/rules"


@dataclass
class ServerConfig:
    """Status API server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    url_prefix: str = ""


@dataclass
class Config:
    """Main configuration container."""

    moduledir: str = DEFAULT_MODULE_DIR
    mountsource: str = ""  # Blank matches DEFAULT_MOUNT_SOURCE
    partitions: List[str] = field(default_factory=list)  # Extra partitions beyond the built-ins
    tempdir: str = DEFAULT_TEMPDIR  # Mount base
    rules_dir: str = DEFAULT_RULES_DIR
    probe_timeout: int = 10  # seconds

    server: ServerConfig = field(default_factory=ServerConfig)

    @property
    def mount_base(self) -> str:
        return self.tempdir

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        server_data = data.get("server") or {}
        server = ServerConfig(
            host=server_data.get("host") or "127.0.0.1",
            port=int(server_data.get("port") or 8080),
            url_prefix=server_data.get("url_prefix", "") or "",
        )

        return cls(
            moduledir=data.get("moduledir") or DEFAULT_MODULE_DIR,
            mountsource=_as_str(data.get("mountsource")),
            partitions=parse_partition_list(data.get("partitions")),
            tempdir=data.get("tempdir") or DEFAULT_TEMPDIR,
            rules_dir=data.get("rules_dir") or DEFAULT_RULES_DIR,
            probe_timeout=int(data.get("probe_timeout") or 10),
            server=server,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load config from YAML file."""
        if not path.exists():
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load config from path or defaults.

        Checks in order:
        1. Provided path
        2. META_HYBRID_CONFIG env var
        3. /data/adb/meta-hybrid/config.yaml
        4. ./config.yaml
        5. Default config
        """
        paths_to_try = []

        if config_path:
            paths_to_try.append(Path(config_path))

        if env_path := os.environ.get("META_HYBRID_CONFIG"):
            paths_to_try.append(Path(env_path))

        paths_to_try.extend([
            Path(BASE_DIR) / "config.yaml",
            Path("./config.yaml"),
        ])

        for path in paths_to_try:
            if path.exists():
                return cls.from_yaml(path)

        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "moduledir": self.moduledir,
            "mountsource": self.mountsource,
            "partitions": list(self.partitions),
            "tempdir": self.tempdir,
            "rules_dir": self.rules_dir,
            "probe_timeout": self.probe_timeout,
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "url_prefix": self.server.url_prefix,
            },
        }


def parse_partition_list(value: Any) -> List[str]:
    """Accept a YAML list or a comma separated string of partition names."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v is not None]
    else:
        return []
    return [item.strip() for item in items if item.strip()]


def _as_str(value: Any) -> str:
    return "" if value is None else str(value).strip()
