"""Configuration loading and validation for hostprobe."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_PERIOD_MS = 1000


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""


@dataclass
class CollectorConfig:
    """Sampling period and verbosity level of one collector."""

    period_ms: int = DEFAULT_PERIOD_MS
    level: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.period_ms, bool) or not isinstance(self.period_ms, int):
            raise ConfigError(f"period_ms must be an integer, got {self.period_ms!r}")
        if self.period_ms <= 0:
            raise ConfigError(f"period_ms must be positive, got {self.period_ms}")
        if isinstance(self.level, bool) or not isinstance(self.level, int):
            raise ConfigError(f"level must be an integer, got {self.level!r}")
        if self.level < 0:
            raise ConfigError(f"level must not be negative, got {self.level}")

    @property
    def enabled(self) -> bool:
        return self.level > 0


def _check_names(key: str, names: Any) -> list[str]:
    if not isinstance(names, (list, tuple)) or not all(isinstance(n, str) for n in names):
        raise ConfigError(f"{key} must be a list of strings, got {names!r}")
    return list(names)


@dataclass
class DiskCollectorConfig(CollectorConfig):
    """Disk collector settings; *names* is the device allow-list."""

    names: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__post_init__()
        self.names = _check_names("names", self.names)


@dataclass
class NetCollectorConfig(CollectorConfig):
    """Network collector settings; *interfaces* is the interface allow-list."""

    interfaces: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__post_init__()
        self.interfaces = _check_names("interfaces", self.interfaces)


@dataclass
class ProbeConfig:
    """Top-level hostprobe configuration."""

    cpu: CollectorConfig = field(default_factory=CollectorConfig)
    memory: CollectorConfig = field(default_factory=CollectorConfig)
    load: CollectorConfig = field(default_factory=CollectorConfig)
    disk: DiskCollectorConfig = field(default_factory=DiskCollectorConfig)
    net: NetCollectorConfig = field(default_factory=NetCollectorConfig)


_SECTIONS: dict[str, type[CollectorConfig]] = {
    "cpu": CollectorConfig,
    "memory": CollectorConfig,
    "load": CollectorConfig,
    "disk": DiskCollectorConfig,
    "net": NetCollectorConfig,
}


def _int(env_key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{env_key} must be an integer, got {value!r}") from None


def _names(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using HOSTPROBE_ prefix."""
    value = os.environ.get("HOSTPROBE_PERIOD_MS")
    if value is not None:
        data["period_ms"] = _int("HOSTPROBE_PERIOD_MS", value)

    env_map = {
        "HOSTPROBE_CPU_LEVEL": ("cpu", "level"),
        "HOSTPROBE_MEMORY_LEVEL": ("memory", "level"),
        "HOSTPROBE_LOAD_LEVEL": ("load", "level"),
        "HOSTPROBE_DISK_LEVEL": ("disk", "level"),
        "HOSTPROBE_NET_LEVEL": ("net", "level"),
        "HOSTPROBE_DISK_NAMES": ("disk", "names"),
        "HOSTPROBE_NET_INTERFACES": ("net", "interfaces"),
    }
    for env_key, (section, key) in env_map.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        obj = data.get(section)
        if not isinstance(obj, dict):
            obj = data[section] = {}
        if key == "level":
            obj[key] = _int(env_key, value)
        else:
            obj[key] = _names(value)
    return data


def _dict_to_config(data: dict[str, Any]) -> ProbeConfig:
    """Convert a raw dictionary to a ProbeConfig dataclass."""
    default_period = data.get("period_ms", DEFAULT_PERIOD_MS)
    sections: dict[str, CollectorConfig] = {}
    for section, cls in _SECTIONS.items():
        raw = data.get(section) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"section {section!r} must be a mapping, got {raw!r}")
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in raw.items() if k in known}
        kwargs.setdefault("period_ms", default_period)
        sections[section] = cls(**kwargs)
    return ProbeConfig(**sections)


def load_config(path: str | Path | None = None) -> ProbeConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``hostprobe.yaml`` in the current directory if *path* is None.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("hostprobe.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
