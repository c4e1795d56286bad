"""Utility functions for hold."""

from hold.core.utils.config import (
    ConfigError,
    load_and_resolve_config,
    load_config_from_module,
    resolve_config_inheritance,
)
from hold.core.utils.env import env_flag, load_env_file_if_present

__all__ = [
    "env_flag",
    "load_env_file_if_present",
    "load_config_from_module",
    "load_and_resolve_config",
    "resolve_config_inheritance",
    "ConfigError",
]
