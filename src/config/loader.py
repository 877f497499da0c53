"""YAML configuration loader with environment variable overrides.

Configuration is resolved in layers, later layers winning:

  1. ``config/config.yaml`` -- static tunables checked into the repo
  2. ``.env`` file          -- local developer overrides (not committed)
  3. Environment variables  -- set at deploy time

``load_config`` reads the YAML file and deep-merges the environment-backed
:class:`~src.config.settings.Settings` values on top, e.g.::

    base      = {"index": {"dimension": 1024}}
    overrides = {"index": {"name": "contracts"}}
    result    = {"index": {"dimension": 1024, "name": "contracts"}}
"""

from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            an empty base so the built-in defaults in each component apply.
        settings: Settings instance to merge; a fresh one is read from the
            environment when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file exists but cannot be parsed or
            does not contain a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(message=f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(message=f"{config_path} must contain a mapping")
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "index": {
            "name": settings.pinecone_index,
            "namespace": settings.pinecone_namespace,
            "cloud": settings.pinecone_cloud,
            "region": settings.pinecone_region,
        },
        "embedding": {
            "model": settings.voyage_model,
        },
        "documents": {
            "docs_dir": settings.docs_dir,
            "metadata_path": settings.metadata_path,
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
