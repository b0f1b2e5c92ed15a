"""
YAML game configuration loading.
"""

import yaml
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional

from .game_config import GameConfig

CONFIG_KEYS = {f.name for f in fields(GameConfig)}


def _coerce(key: str, value: Any) -> Any:
    # YAML keys for per-seat agents may come through as strings
    if key == "agent_types" and value:
        return {int(seat): agent for seat, agent in value.items()}
    if key in ("role_distribution", "must_run_roles") and value:
        return [str(role).strip().lower() for role in value]
    return value


def load_config_from_yaml(config_path: str) -> GameConfig:
    """
    Build a GameConfig from a YAML file. Keys missing from the file keep
    their defaults; unknown keys are reported and skipped.

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The file is not a mapping of settings
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, 'r') as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return GameConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must hold a mapping of settings: {config_path}")

    overrides: Dict[str, Any] = {}
    for key, value in raw.items():
        if key in CONFIG_KEYS:
            overrides[key] = _coerce(key, value)
        else:
            print(f"Warning: Unknown config key '{key}' in YAML file")

    return GameConfig(**overrides)


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """Defaults when no path is given, otherwise the YAML file."""
    if config_path is None:
        return GameConfig()
    return load_config_from_yaml(config_path)
