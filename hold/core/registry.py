"""Registry for named storage providers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from hold.core.backends.filesystem_backend import FilesystemProvider
from hold.core.backends.memory_backend import MemoryProvider
from hold.core.backends.prefixed_backend import PrefixedProvider
from hold.core.backends.s3_backend import S3Config, S3Credentials, S3Provider
from hold.core.provider import Provider
from hold.core.utils.config import load_and_resolve_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_MODULE = "configs.providers"


class ProviderConfigError(Exception):
    """Raised when provider configuration is invalid."""

    pass


class ProviderNotFoundError(Exception):
    """Raised when a named provider is not found in configuration."""

    pass


class ProviderRegistry:
    """Registry for managing named storage providers.

    Names support hierarchical namespacing with dot notation: the first
    segment selects a configured provider and the rest becomes a key prefix.

    Examples:
        >>> registry = ProviderRegistry({"dev": {"type": "memory"}})
        >>> provider = registry.get_provider("dev")
        >>> provider = registry.get_provider("dev.images.thumbnails")
    """

    def __init__(self, configuration: dict[str, dict[str, Any]] | None = None):
        """Initialize the registry.

        Args:
            configuration: Provider configuration dict. If None, loads and resolves
                           configuration from configs/providers.py with inheritance
        """
        if configuration is None:
            configuration = load_and_resolve_config(DEFAULT_CONFIG_MODULE, default={})

        self._config = configuration
        self._provider_cache: dict[str, Provider] = {}

    def parse_name(self, name: str) -> tuple[str, str]:
        """Parse a provider name into base name and prefix.

        Examples:
            >>> registry.parse_name("dev")
            ("dev", "")
            >>> registry.parse_name("dev.images.thumbnails")
            ("dev", "images/thumbnails")
        """
        base_name, _, rest = name.partition(".")
        return base_name, rest.replace(".", "/")

    def create_provider(self, config: dict[str, Any]) -> Provider:
        """Create a provider instance from configuration.

        Args:
            config: Provider configuration dict with "type" and type-specific params

        Returns:
            Instantiated provider

        Raises:
            ProviderConfigError: If configuration is invalid
        """
        provider_type = config.get("type")

        if not provider_type:
            raise ProviderConfigError("Provider configuration must specify 'type'")

        if provider_type == "memory":
            return MemoryProvider()

        elif provider_type == "filesystem":
            base_path = config.get("base_path")
            if not base_path:
                raise ProviderConfigError("Filesystem provider requires 'base_path'")

            return FilesystemProvider(base_path=Path(base_path))

        elif provider_type == "s3":
            if not config.get("bucket"):
                raise ProviderConfigError("S3 provider requires 'bucket'")

            access_key = config.get("access_key")
            secret_key = config.get("secret_key")
            if bool(access_key) != bool(secret_key):
                raise ProviderConfigError(
                    "S3 provider needs both 'access_key' and 'secret_key', or neither"
                )

            credentials = None
            if access_key:
                credentials = S3Credentials(
                    access_key_id=access_key,
                    secret_access_key=secret_key,
                    session_token=config.get("session_token"),
                )

            return S3Provider(
                S3Config(
                    bucket=config["bucket"],
                    endpoint=config.get("endpoint"),
                    region=config.get("region"),
                    credentials=credentials,
                    secure=config.get("secure", True),
                    create_bucket=config.get("create_bucket", False),
                )
            )

        else:
            raise ProviderConfigError(f"Unknown provider type: {provider_type}")

    def get_provider(self, name: str, use_cache: bool = True) -> Provider:
        """Get a provider instance by name.

        Args:
            name: Provider name with optional namespace (e.g., "dev", "dev.images.thumbnails")
            use_cache: Whether to use cached provider instances

        Returns:
            Provider instance (wrapped with a prefix for dotted names)

        Raises:
            ProviderNotFoundError: If base name not found in configuration
            ProviderConfigError: If provider configuration is invalid
        """
        if use_cache and name in self._provider_cache:
            return self._provider_cache[name]

        base_name, prefix = self.parse_name(name)

        if base_name not in self._config:
            available = ", ".join(self._config.keys())
            raise ProviderNotFoundError(
                f"Provider '{base_name}' not found in configuration. "
                f"Available providers: {available or 'none'}"
            )

        if use_cache and base_name in self._provider_cache:
            base_provider = self._provider_cache[base_name]
        else:
            base_provider = self.create_provider(self._config[base_name])
            if use_cache:
                self._provider_cache[base_name] = base_provider

        provider = PrefixedProvider(base_provider, prefix) if prefix else base_provider

        if use_cache:
            self._provider_cache[name] = provider

        logger.info(f"Created provider for '{name}' (base: {base_name}, prefix: {prefix or 'none'})")
        return provider

    def list_providers(self) -> list[str]:
        """List all configured provider names."""
        return list(self._config.keys())

    def register(self, name: str, config: dict[str, Any]) -> None:
        """Register a provider configuration, replacing any cached instances for it.

        Args:
            name: Provider name
            config: Provider configuration dict
        """
        self._config[name] = config
        stale = [k for k in self._provider_cache if k == name or k.startswith(name + ".")]
        for key in stale:
            del self._provider_cache[key]

    def clear_cache(self) -> None:
        """Clear the provider instance cache."""
        self._provider_cache.clear()


# Global registry instance
_default_registry: ProviderRegistry | None = None


def get_default_registry() -> ProviderRegistry:
    """Get the default global registry instance."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ProviderRegistry()
    return _default_registry


def get_provider(name: str) -> Provider:
    """Get a provider by name from the default registry.

    Examples:
        >>> from hold.core.registry import get_provider
        >>> provider = get_provider("local.images")
    """
    return get_default_registry().get_provider(name)
