"""Storage provider contract.

Every backend implements the four coroutines below. Lookups of a missing key
are not errors: ``get_blob`` returns ``None`` and ``is_blob_present`` returns
``False``. Any other backend failure is raised as ``ProviderError`` (or
``BodyError`` when a successful response carries no readable payload), with
the backend's own exception kept as the cause.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from hold.core.blob import Blob
from hold.core.errors import ProviderError


def validate_key(key: str) -> str:
    """Check that a key is a non-empty string.

    Raises:
        ProviderError: With a ``ValueError`` cause for an invalid key
    """
    if not isinstance(key, str) or not key:
        raise ProviderError(ValueError(f"Blob key must be a non-empty string, got {key!r}"))
    return key


class Provider(ABC):
    """Abstract base class for storage providers.

    A provider may be shared by concurrent callers. It must not keep
    per-call state between operations, and it performs no retries: a
    backend failure is translated and raised once.
    """

    @abstractmethod
    async def get_blob(self, key: str) -> Blob | None:
        """Fetch a blob given its key.

        Args:
            key: Blob key

        Returns:
            Blob streaming its content from the backend, or None if absent

        Raises:
            ProviderError: On any backend failure other than absence
            BodyError: If the backend succeeded without a readable body
        """
        pass

    @abstractmethod
    async def store_blob(self, blob: Blob) -> Blob:
        """Store the given blob, consuming its content.

        Args:
            blob: Blob to store

        Returns:
            Either the payload echoed back or an empty blob carrying only key
            and size, depending on the provider

        Raises:
            ProviderError: On backend failure
        """
        pass

    @abstractmethod
    async def is_blob_present(self, key: str) -> bool:
        """Check if a blob exists.

        Some implementations may still load the content if the backend does
        not support headless lookups.

        Args:
            key: Blob key

        Returns:
            True if the blob exists, False otherwise

        Raises:
            ProviderError: On any backend failure other than absence
        """
        pass

    @abstractmethod
    async def delete_blob(self, key: str) -> None:
        """Delete a blob. Deleting a missing key succeeds.

        Args:
            key: Blob key

        Raises:
            ProviderError: On backend failure
        """
        pass

    async def aclose(self) -> None:
        """Release resources held by the provider."""
        pass

    async def __aenter__(self) -> Provider:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
