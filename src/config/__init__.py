"""Configuration package.

``settings`` is a module-level :class:`Settings` read once at import time;
``load_config`` layers ``config/config.yaml`` under those values.
"""

from src.config.loader import load_config
from src.config.settings import Settings

settings = Settings()

__all__ = ["Settings", "load_config", "settings"]
