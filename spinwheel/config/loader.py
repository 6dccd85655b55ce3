"""YAML loaders for the config subsystem.

``wheel.yml`` holds the prize list and every runtime section in a single
mapping; it is validated via models.py and returned as a :class:`WheelConfig`.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

import yaml

from spinwheel.core.errors import ConfigurationError

from .models import WheelConfig

_DEFAULT_CONFIG_DIR = Path("config")
CONFIG_PATH_ENV = "SPINWHEEL_CONFIG_PATH"


def _read_yaml(path: Path) -> Mapping:
    """Read a YAML file and return a mapping (empty dict if file is blank)."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as fp:
        try:
            data = yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Malformed YAML in {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"YAML root must be a mapping in {path}")
    return data


def load_wheel_config(path: Path | str = _DEFAULT_CONFIG_DIR / "wheel.yml") -> WheelConfig:
    """Load wheel.yml (feature flag, prizes, spin limits, storage, telemetry)."""

    data = _read_yaml(Path(path))
    return WheelConfig.model_validate(data)


def resolve_config_path(config_dir: Path = _DEFAULT_CONFIG_DIR) -> Path:
    """Return the config path from ``SPINWHEEL_CONFIG_PATH`` or ``config_dir``."""

    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return config_dir / "wheel.yml"
