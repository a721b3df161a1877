"""YAML configuration loader with environment variable overrides.

Configuration is layered, later layers winning:

1. ``config/config.yaml``: pipeline tunables checked into the repo.
2. ``.env`` file and environment variables, read through :class:`Settings`.

Pipeline code reads the merged dict with ``.get()`` defaults, so a missing
YAML file still yields a working configuration.
"""

from pathlib import Path

import yaml

from src.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Parameters
    ----------
    path:
        Path to the YAML configuration file.
    settings:
        Pre-built settings; a fresh :class:`Settings` is read when omitted.

    Returns
    -------
    dict
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
            "pipeline_timeout_seconds": settings.pipeline_timeout_seconds,
        },
        "llm": {
            "available_providers": settings.get_available_llm_providers(),
        },
        "storage": {
            "backend": settings.storage_backend,
            "dir": settings.storage_dir,
            "base_url": settings.storage_base_url,
        },
        "database": {
            "path": settings.database_path,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
