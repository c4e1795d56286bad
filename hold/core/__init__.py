"""Blob abstraction, provider contract and error taxonomy."""

from hold.core.blob import Blob
from hold.core.errors import (
    BlobConsumedError,
    BodyError,
    ErrorKind,
    HoldError,
    NotFoundError,
    ProviderError,
    StreamConsumedError,
)
from hold.core.provider import Provider
from hold.core.registry import (
    ProviderConfigError,
    ProviderNotFoundError,
    ProviderRegistry,
    get_default_registry,
    get_provider,
)
from hold.core.store import BlobStore
from hold.core.stream import ByteStream

__all__ = [
    # Core
    "Blob",
    "ByteStream",
    "Provider",
    "BlobStore",
    # Errors
    "HoldError",
    "ErrorKind",
    "NotFoundError",
    "ProviderError",
    "BodyError",
    "BlobConsumedError",
    "StreamConsumedError",
    # Registry
    "ProviderRegistry",
    "ProviderConfigError",
    "ProviderNotFoundError",
    "get_default_registry",
    "get_provider",
]
