"""In-memory provider implementation."""

from __future__ import annotations

import logging

from hold.core.blob import Blob
from hold.core.errors import ProviderError
from hold.core.provider import Provider, validate_key

logger = logging.getLogger(__name__)


class MemoryProvider(Provider):
    """Provider keeping payloads in a process-local dict.

    Handy as a test double. ``store_blob`` echoes the stored payload back.
    """

    def __init__(self, initial: dict[str, bytes] | None = None):
        """Initialize memory provider.

        Args:
            initial: Optional key to payload mapping to start with
        """
        self._blobs: dict[str, bytes] = dict(initial or {})

    def __len__(self) -> int:
        return len(self._blobs)

    async def get_blob(self, key: str) -> Blob | None:
        validate_key(key)
        logger.debug(f"Fetching blob {key}")
        data = self._blobs.get(key)
        if data is None:
            logger.debug(f"Blob {key} not found")
            return None
        return Blob.from_bytes(key, data)

    async def store_blob(self, blob: Blob) -> Blob:
        async with blob.into_stream() as stream:
            key = validate_key(blob.key)
            logger.debug(f"Storing blob {key} of {blob.size} bytes")
            try:
                data = await stream.read_all()
            except OSError as e:
                raise ProviderError(e) from e

        if len(data) != blob.size:
            raise ProviderError(
                ValueError(f"Blob {key} declared {blob.size} bytes but produced {len(data)}")
            )

        self._blobs[key] = data
        return Blob.from_bytes(key, data)

    async def is_blob_present(self, key: str) -> bool:
        validate_key(key)
        logger.debug(f"Checking blob {key} presence")
        return key in self._blobs

    async def delete_blob(self, key: str) -> None:
        validate_key(key)
        logger.debug(f"Deleting blob {key}")
        self._blobs.pop(key, None)

    def __repr__(self) -> str:
        return f"MemoryProvider(blobs={len(self._blobs)})"
