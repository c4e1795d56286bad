"""Internal prefix wrapper for providers.

This module is for internal use by the registry only and should not be imported directly.
"""

from __future__ import annotations

from hold.core.blob import Blob
from hold.core.errors import ProviderError
from hold.core.provider import Provider, validate_key


class PrefixedProvider(Provider):
    """Wrapper that adds a prefix to all keys for any provider.

    This is an internal utility used by the registry to support hierarchical namespacing.
    Users should not instantiate this directly - use ``ProviderRegistry.get_provider()``.
    """

    def __init__(self, provider: Provider, prefix: str = ""):
        """Initialize prefixed provider wrapper.

        Args:
            provider: The underlying provider to wrap
            prefix: Prefix to add to all keys (e.g., "images/thumbnails")
        """
        self._provider = provider
        # Normalize prefix: ensure it ends with "/" if not empty
        self._prefix = prefix.strip("/") + "/" if prefix.strip("/") else ""

    @property
    def prefix(self) -> str:
        return self._prefix

    def _add_prefix(self, key: str) -> str:
        return self._prefix + validate_key(key)

    def _remove_prefix(self, key: str) -> str:
        if self._prefix and key.startswith(self._prefix):
            return key[len(self._prefix) :]
        return key

    def _rekey(self, blob: Blob) -> Blob:
        """Return the same payload under the unprefixed key."""
        key = self._remove_prefix(blob.key)
        if key == blob.key:
            return blob
        size = blob.size
        return Blob(key, size, blob.into_stream())

    async def get_blob(self, key: str) -> Blob | None:
        blob = await self._provider.get_blob(self._add_prefix(key))
        return self._rekey(blob) if blob is not None else None

    async def store_blob(self, blob: Blob) -> Blob:
        size = blob.size
        stream = blob.into_stream()
        try:
            key = self._add_prefix(blob.key)
        except ProviderError:
            await stream.aclose()
            raise
        prefixed = Blob(key, size, stream)
        return self._rekey(await self._provider.store_blob(prefixed))

    async def is_blob_present(self, key: str) -> bool:
        return await self._provider.is_blob_present(self._add_prefix(key))

    async def delete_blob(self, key: str) -> None:
        await self._provider.delete_blob(self._add_prefix(key))

    def __repr__(self) -> str:
        return f"PrefixedProvider({self._provider!r}, prefix={self._prefix!r})"
