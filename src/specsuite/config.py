"""Run configuration stored in ``specsuite.yaml`` at the project root."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from specsuite.errors import ConfigError

CONFIG_FILE = "specsuite.yaml"


@dataclass
class RunConfig:
    """Defaults for ``specsuite run``; command-line options override them."""

    suites: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)
    parallel: int = 0
    color: bool = True


def _config_path(project_root: Path) -> Path:
    return project_root / CONFIG_FILE


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"'{key}' must be a list of non-empty strings")
    return list(value)


def save_config(config: RunConfig, project_root: Path) -> Path:
    """Save run config to specsuite.yaml. Returns the config path."""
    path = _config_path(project_root)
    data = {
        "suites": config.suites,
        "include": config.include,
        "exclude": config.exclude,
        "config": config.config,
        "parallel": config.parallel,
        "color": config.color,
    }
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


def load_config(project_root: Path) -> RunConfig:
    """Load run config from specsuite.yaml."""
    path = _config_path(project_root)
    if not path.exists():
        raise FileNotFoundError(f"No config found at {path}")
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, not {type(data).__name__}")

    config_map = data.get("config") or {}
    if not isinstance(config_map, dict):
        raise ConfigError("'config' must be a mapping")
    parallel = data.get("parallel", 0)
    if isinstance(parallel, bool) or not isinstance(parallel, int) or parallel < 0:
        raise ConfigError("'parallel' must be a non-negative integer")
    color = data.get("color", True)
    if not isinstance(color, bool):
        raise ConfigError("'color' must be true or false")

    return RunConfig(
        suites=_string_list(data, "suites"),
        include=_string_list(data, "include"),
        exclude=_string_list(data, "exclude"),
        config={str(k): v for k, v in config_map.items()},
        parallel=parallel,
        color=color,
    )


def is_initialized(project_root: Path) -> bool:
    """Check if the project has a specsuite.yaml."""
    return _config_path(project_root).exists()


def load_or_default(project_root: Path) -> RunConfig:
    """Load specsuite.yaml if present, else return the defaults."""
    if not is_initialized(project_root):
        return RunConfig()
    return load_config(project_root)
