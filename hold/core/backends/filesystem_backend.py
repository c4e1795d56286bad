"""Filesystem provider implementation."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import tempfile
from pathlib import Path

from hold.core.blob import Blob
from hold.core.errors import ProviderError
from hold.core.provider import Provider, validate_key
from hold.core.stream import DEFAULT_CHUNK_SIZE, ByteStream

logger = logging.getLogger(__name__)

# OS errors meaning "no blob under this key", for every operation
_ABSENT_ERRORS = (FileNotFoundError, NotADirectoryError, IsADirectoryError)


class FilesystemProvider(Provider):
    """Filesystem implementation of the storage provider.

    Blobs are stored as plain files below ``base_path``, the key being the
    relative path. Writes go to a temporary file that is renamed into place,
    so a failed store never leaves a partial blob behind. ``store_blob``
    returns an empty blob.
    """

    def __init__(self, base_path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize filesystem provider.

        Args:
            base_path: Base directory path for storing blobs
            chunk_size: Chunk size used when streaming blobs out
        """
        self._base_path = Path(base_path).expanduser().resolve()
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._chunk_size = chunk_size
        logger.info(f"Initialized filesystem provider at: {self._base_path}")

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _get_blob_path(self, key: str) -> Path:
        """Get the full path for a blob file.

        Keys must be normalized relative paths ("a/b.txt", not "a//b.txt",
        "./b.txt" or "a/../b.txt") so that distinct keys never share a file,
        and must stay below base_path.
        """
        validate_key(key)
        if "\x00" in key or any(part in ("", ".", "..") for part in key.split("/")):
            raise ProviderError(ValueError(f"Blob key {key!r} is not a normalized relative path"))

        try:
            blob_path = (self._base_path / key).resolve()
        except (OSError, ValueError) as e:
            raise ProviderError(e) from e
        if blob_path == self._base_path or self._base_path not in blob_path.parents:
            raise ProviderError(ValueError(f"Blob key {key!r} resolves outside {self._base_path}"))
        return blob_path

    async def get_blob(self, key: str) -> Blob | None:
        blob_path = self._get_blob_path(key)
        logger.debug(f"Fetching blob {key}")

        try:
            f = await asyncio.to_thread(open, blob_path, "rb")
        except _ABSENT_ERRORS:
            logger.debug(f"Blob {key} not found")
            return None
        except OSError as e:
            raise ProviderError(e) from e

        try:
            size = (await asyncio.to_thread(os.fstat, f.fileno())).st_size
        except OSError as e:
            f.close()
            raise ProviderError(e) from e

        return Blob(key, size, ByteStream.from_reader(f, self._chunk_size))

    async def store_blob(self, blob: Blob) -> Blob:
        key = blob.key
        size = blob.size

        # The payload is released on every exit path, including a rejected key
        async with blob.into_stream() as stream:
            blob_path = self._get_blob_path(key)
            logger.debug(f"Storing blob {key} of {size} bytes")

            tmp_path: Path | None = None
            try:
                await asyncio.to_thread(blob_path.parent.mkdir, parents=True, exist_ok=True)
                fd, tmp_name = await asyncio.to_thread(
                    tempfile.mkstemp, dir=blob_path.parent, prefix=".", suffix=".part"
                )
                tmp_path = Path(tmp_name)

                written = 0
                with os.fdopen(fd, "wb") as f:
                    async for chunk in stream:
                        await asyncio.to_thread(f.write, chunk)
                        written += len(chunk)

                if written != size:
                    raise ValueError(f"Blob {key} declared {size} bytes but produced {written}")

                await asyncio.to_thread(os.replace, tmp_path, blob_path)
                tmp_path = None

            except (OSError, ValueError) as e:
                raise ProviderError(e) from e
            finally:
                if tmp_path is not None:
                    tmp_path.unlink(missing_ok=True)

        logger.info(f"Stored blob: {key} ({size} bytes)")
        return Blob.empty(key, size)

    async def is_blob_present(self, key: str) -> bool:
        blob_path = self._get_blob_path(key)
        logger.debug(f"Checking blob {key} presence")

        try:
            st = await asyncio.to_thread(os.stat, blob_path)
        except _ABSENT_ERRORS:
            logger.debug(f"Blob {key} not found")
            return False
        except OSError as e:
            raise ProviderError(e) from e

        return stat.S_ISREG(st.st_mode)

    async def delete_blob(self, key: str) -> None:
        blob_path = self._get_blob_path(key)
        logger.debug(f"Deleting blob {key}")

        try:
            await asyncio.to_thread(blob_path.unlink)
        except _ABSENT_ERRORS:
            logger.debug(f"Blob {key} already absent")
            return
        except OSError as e:
            raise ProviderError(e) from e

        await asyncio.to_thread(self._cleanup_empty_dirs, blob_path.parent)
        logger.info(f"Deleted blob: {key}")

    def _cleanup_empty_dirs(self, path: Path) -> None:
        """Remove empty parent directories up to base_path."""
        while path != self._base_path and self._base_path in path.parents:
            try:
                path.rmdir()
            except OSError:
                # Not empty, or a concurrent store just populated it
                break
            path = path.parent

    def __repr__(self) -> str:
        return f"FilesystemProvider(base_path={str(self._base_path)!r})"
