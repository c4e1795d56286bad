"""Configuration loading utilities using importlib.

Provider configuration lives in plain Python modules exporting a dict (by
default ``CONFIGURATION``) that maps provider names to their settings. A
setting block may inherit from another one through the ``__inherits__`` key.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

logger = logging.getLogger(__name__)

INHERITS_KEY = "__inherits__"


class ConfigError(Exception):
    """Raised when configuration loading or resolution fails."""

    pass


def load_config_from_module(
    module_path: str,
    config_name: str = "CONFIGURATION",
    default: Any | None = None,
) -> Any:
    """Load a configuration object from a Python module.

    Args:
        module_path: Dotted module path (e.g., "configs.providers")
        config_name: Name of the attribute to retrieve
        default: Value returned when the module or attribute is missing

    Returns:
        The configuration object, or ``default``

    Examples:
        >>> config = load_config_from_module("configs.providers")
    """
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as e:
        logger.warning(f"Could not import module '{module_path}': {e}")
        return default

    if not hasattr(module, config_name):
        logger.warning(f"Module '{module_path}' does not have attribute '{config_name}'")
        return default

    logger.debug(f"Loaded configuration from {module_path}.{config_name}")
    return getattr(module, config_name)


def resolve_config_inheritance(config_dict: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Resolve ``__inherits__`` relationships in a configuration dict.

    The child's keys override the parent's; the ``__inherits__`` key itself is
    dropped from the result. Chains of any depth are followed.

    Args:
        config_dict: Configuration dictionary with potential inheritance relationships

    Returns:
        Fully resolved configuration dictionary

    Raises:
        ConfigError: If inheritance is circular or names an unknown parent

    Examples:
        >>> config = {
        ...     "remote": {"type": "s3", "bucket": "blobs"},
        ...     "remote-eu": {"__inherits__": "remote", "region": "eu-west-1"},
        ... }
        >>> resolve_config_inheritance(config)["remote-eu"]["bucket"]
        'blobs'
    """
    resolved_configs: dict[str, dict[str, Any]] = {}

    def _resolve_single(name: str, chain: list[str]) -> dict[str, Any]:
        if name in chain:
            raise ConfigError(f"Circular inheritance detected: {' -> '.join(chain + [name])}")
        if name in resolved_configs:
            return resolved_configs[name]

        config = config_dict[name]
        parent_name = config.get(INHERITS_KEY)
        if parent_name is None:
            resolved = dict(config)
        else:
            if parent_name not in config_dict:
                raise ConfigError(
                    f"Configuration '{name}' inherits from '{parent_name}', "
                    f"but '{parent_name}' not found"
                )
            resolved = dict(_resolve_single(parent_name, chain + [name]))
            resolved.update({k: v for k, v in config.items() if k != INHERITS_KEY})
            logger.debug(f"Resolved inheritance for '{name}' from '{parent_name}'")

        resolved_configs[name] = resolved
        return resolved

    for name in config_dict:
        _resolve_single(name, [])

    return resolved_configs


def load_and_resolve_config(
    module_path: str,
    config_name: str = "CONFIGURATION",
    default: dict[str, dict[str, Any]] | None = None,
) -> dict[str, dict[str, Any]]:
    """Load configuration from a module and resolve inheritance.

    Args:
        module_path: Dotted module path (e.g., "configs.providers")
        config_name: Name of the attribute to retrieve
        default: Configuration used when loading fails

    Returns:
        Fully resolved configuration dictionary

    Raises:
        ConfigError: If inheritance cannot be resolved
    """
    raw_config = load_config_from_module(module_path, config_name, default)

    if not isinstance(raw_config, dict):
        logger.warning(f"Invalid configuration loaded from {module_path}, using default")
        return dict(default or {})

    resolved = resolve_config_inheritance(raw_config)
    logger.info(f"Loaded and resolved {len(resolved)} configurations from {module_path}")
    return resolved
