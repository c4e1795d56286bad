"""High-level blob store facade over a provider."""

from __future__ import annotations

from hold.core.blob import Blob
from hold.core.errors import NotFoundError
from hold.core.provider import Provider


class BlobStore:
    """High-level blob storage interface with pluggable providers.

    Adds byte-level helpers and a lookup that treats absence as an error,
    for callers that already believe the blob exists.
    """

    def __init__(self, provider: Provider):
        """Initialize blob store.

        Args:
            provider: Storage provider implementation
        """
        self._provider = provider

    @classmethod
    def from_name(cls, name: str) -> BlobStore:
        """Create a store for a named provider of the default registry.

        Args:
            name: Provider name (e.g., "local", "local.images.thumbnails")
        """
        from hold.core.registry import get_provider

        return cls(get_provider(name))

    @property
    def provider(self) -> Provider:
        return self._provider

    async def get(self, key: str) -> Blob | None:
        """Fetch a blob, or None if absent."""
        return await self._provider.get_blob(key)

    async def store(self, blob: Blob) -> Blob:
        """Store a blob."""
        return await self._provider.store_blob(blob)

    async def exists(self, key: str) -> bool:
        """Check if a blob exists."""
        return await self._provider.is_blob_present(key)

    async def delete(self, key: str) -> None:
        """Delete a blob; missing keys are ignored."""
        await self._provider.delete_blob(key)

    async def put_bytes(self, key: str, data: bytes) -> Blob:
        """Store an in-memory buffer under key."""
        return await self._provider.store_blob(Blob.from_bytes(key, data))

    async def get_bytes(self, key: str) -> bytes | None:
        """Fetch a blob's full content, or None if absent."""
        blob = await self._provider.get_blob(key)
        if blob is None:
            return None
        return await blob.read()

    async def require(self, key: str) -> Blob:
        """Fetch a blob that must exist.

        Raises:
            NotFoundError: If the provider reports the key absent
        """
        blob = await self._provider.get_blob(key)
        if blob is None:
            raise NotFoundError(key, LookupError(f"No blob stored under {key!r}"))
        return blob
