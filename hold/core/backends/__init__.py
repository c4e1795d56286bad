"""Storage provider implementations."""

from hold.core.backends.filesystem_backend import FilesystemProvider
from hold.core.backends.memory_backend import MemoryProvider
from hold.core.backends.prefixed_backend import PrefixedProvider
from hold.core.backends.s3_backend import S3Config, S3Credentials, S3Provider

__all__ = [
    "FilesystemProvider",
    "MemoryProvider",
    "PrefixedProvider",
    "S3Config",
    "S3Credentials",
    "S3Provider",
]
