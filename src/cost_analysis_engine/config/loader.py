"""Configuration loader for the cost analysis engine."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml

from cost_analysis_engine.config.schema import Config


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir() -> Path:
    """Find the config directory, searching up from current directory."""
    if config_dir := os.environ.get("CONFIG_DIR"):
        return Path(config_dir)

    current = Path.cwd()
    while current != current.parent:
        config_path = current / "config"
        if config_path.is_dir():
            return config_path
        current = current.parent

    return Path("config")


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(
    config_path: str | Path | None = None,
    environment: str | None = None,
) -> Config:
    """
    Load configuration from YAML files.

    Loads config.yaml as base, then merges environment-specific overrides
    (e.g., config.dev.yaml, config.prod.yaml). Missing files are fine;
    every setting has a default.

    Args:
        config_path: Path to config directory. If None, searches for config/ directory.
        environment: Environment name (dev, staging, prod). If None, uses CONFIG_ENV
                    environment variable or defaults to 'dev'.

    Returns:
        Config: Validated configuration object.
    """
    config_dir = Path(config_path) if config_path else _find_config_dir()
    environment = environment or os.environ.get("CONFIG_ENV", "dev")

    config_data = _read_yaml(config_dir / "config.yaml")
    config_data = _deep_merge(config_data, _read_yaml(config_dir / f"config.{environment}.yaml"))
    config_data = _apply_env_overrides(config_data)
    config_data["environment"] = environment

    return Config(**config_data)


# Environment variable -> (config path, type)
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], type]] = {
    "COST_ENGINE_STORAGE_BACKEND": (("storage", "backend"), str),
    "COST_ENGINE_TABLE_NAME": (("storage", "table_name"), str),
    "COST_ENGINE_SENSITIVITY_THRESHOLD": (("anomaly_detection", "sensitivity_threshold"), float),
    "COST_ENGINE_MINIMUM_ANOMALY_AMOUNT": (("anomaly_detection", "minimum_anomaly_amount"), float),
    "COST_ENGINE_MINIMUM_SAVINGS": (("analysis", "minimum_savings_threshold"), float),
    "COST_ENGINE_REPORTING_WINDOW_DAYS": (("reporting", "window_days"), int),
    "COST_ENGINE_ENFORCE_TRANSITIONS": (("lifecycle", "enforce_status_transitions"), bool),
}


def _apply_env_overrides(config_data: dict) -> dict:
    """Apply environment variable overrides to configuration."""
    for env_var, (path, value_type) in ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            current = config_data
            for key in path[:-1]:
                current = current.setdefault(key, {})

            if value_type is bool:
                current[path[-1]] = value.lower() in ("true", "1", "yes")
            else:
                current[path[-1]] = value_type(value)

    return config_data


@lru_cache(maxsize=1)
def get_cached_config() -> Config:
    """
    Get cached configuration singleton.

    Avoids re-reading YAML when many engines are built in one process.
    """
    return load_config()
