"""
Configuration loader and helpers for the LFS integrity checker.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("lfs_fsck.yaml")
ENV_CONFIG_PATH = "LFS_FSCK_CONFIG"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass(frozen=True)
class AppConfig:
    """Container for raw configuration data and path helpers."""

    root_dir: Path
    raw: Dict[str, Any]

    @classmethod
    def load(cls, path: Path | None = None) -> "AppConfig":
        """Load configuration from YAML.

        An explicit path (argument or environment variable) must exist. The
        default ``lfs_fsck.yaml`` is optional and an empty configuration is
        returned when it is absent.
        """
        config_value = os.environ.get(ENV_CONFIG_PATH)
        config_path = path
        required = True
        if config_path is None:
            if config_value:
                config_path = Path(config_value)
            else:
                config_path = DEFAULT_CONFIG_PATH
                required = False
        config_path = config_path.expanduser()
        if not config_path.is_absolute():
            config_path = (Path.cwd() / config_path).resolve()
        if not config_path.exists():
            if required:
                raise FileNotFoundError(f"Config file not found: {config_path}")
            return cls.empty()
        with config_path.open("r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")
        return cls(root_dir=config_path.parent, raw=data)

    @classmethod
    def empty(cls) -> "AppConfig":
        """Return a configuration with no values, rooted at the working directory."""
        return cls(root_dir=Path.cwd(), raw={})

    def get(self, *keys: str, default: Any = None) -> Any:
        """Retrieve nested configuration values with an optional default."""
        node: Any = self.raw
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def get_int(self, *keys: str, default: int = 0) -> int:
        value = self.get(*keys, default=default)
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{'.'.join(keys)} must be an integer, got {value!r}") from exc

    def get_list(self, *keys: str) -> Optional[list[str]]:
        """Return a list of strings, accepting a comma separated string too."""
        value = self.get(*keys)
        if value is None:
            return None
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        raise ConfigError(f"{'.'.join(keys)} must be a list or a comma separated string")

    def resolve_path(self, *keys: str, default: str | None = None) -> Path:
        """Resolve a path from configuration keys to an absolute Path."""
        value = self.get(*keys, default=default)
        if value is None:
            raise KeyError(f"Missing config path for {'.'.join(keys)}")
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = (self.root_dir / path).resolve()
        return path

    def optional_path(self, *keys: str) -> Optional[Path]:
        if self.get(*keys) is None:
            return None
        return self.resolve_path(*keys)


def ensure_directories(paths: Iterable[Path]) -> None:
    """Create directories if they do not already exist."""
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)
