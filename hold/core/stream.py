"""Lazy, single-pass byte streams.

A ``ByteStream`` carries a payload as a sequence of ``bytes`` chunks so large
blobs never have to be resident in memory. Streams are async iterators,
can be iterated once, and release their source when exhausted, when a chunk
fails, or when ``aclose()`` is called.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from typing import BinaryIO

from hold.core.errors import HoldError, StreamConsumedError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

CloseCallback = Callable[[], Awaitable[None]]


class ByteStream:
    """Single-pass async sequence of binary chunks.

    Every failure raised while producing a chunk terminates the stream and
    reaches the caller as an ``OSError``.

    Examples:
        >>> async with ByteStream.from_bytes(b"hello") as stream:
        ...     data = await stream.read_all()
    """

    def __init__(self, source: AsyncIterable[bytes], on_close: CloseCallback | None = None):
        """Initialize a stream.

        Args:
            source: Async iterable producing the chunks
            on_close: Coroutine function releasing the underlying resource
        """
        self._source: AsyncIterator[bytes] = source.__aiter__()
        self._on_close = on_close
        self._iterated = False
        self._closed = False
        self._bytes_read = 0

    @classmethod
    def empty(cls) -> ByteStream:
        """Create a stream that is exhausted on the first read."""
        return cls.from_chunks(())

    @classmethod
    def from_bytes(cls, data: bytes) -> ByteStream:
        """Wrap an in-memory buffer as a single-chunk stream."""
        return cls.from_chunks((data,))

    @classmethod
    def from_chunks(cls, chunks: Iterable[bytes]) -> ByteStream:
        """Wrap in-memory chunks."""

        async def _generate() -> AsyncIterator[bytes]:
            for chunk in chunks:
                yield chunk

        return cls(_generate())

    @classmethod
    def from_async_iterable(
        cls, source: AsyncIterable[bytes], on_close: CloseCallback | None = None
    ) -> ByteStream:
        """Wrap an async chunk source, such as an async HTTP response body."""
        return cls(source, on_close=on_close)

    @classmethod
    def from_reader(
        cls,
        reader: BinaryIO,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        close: Callable[[], None] | None = None,
    ) -> ByteStream:
        """Wrap a blocking file-like object or backend response body.

        Reads run in a worker thread so the event loop is never blocked.

        Args:
            reader: Object with a ``read(size)`` method
            chunk_size: Maximum bytes per chunk
            close: Blocking callable releasing the reader (defaults to ``reader.close``)
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        release = close if close is not None else getattr(reader, "close", None)

        async def _generate() -> AsyncIterator[bytes]:
            while True:
                chunk = await asyncio.to_thread(reader.read, chunk_size)
                if not chunk:
                    return
                yield chunk

        async def _close() -> None:
            if release is not None:
                await asyncio.to_thread(release)

        return cls(_generate(), on_close=_close)

    @property
    def bytes_read(self) -> int:
        """Number of bytes produced so far."""
        return self._bytes_read

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> ByteStream:
        if self._iterated:
            raise StreamConsumedError("Byte stream has already been consumed")
        self._iterated = True
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration

        while True:
            try:
                chunk = await self._source.__anext__()
            except StopAsyncIteration:
                await self.aclose()
                raise
            except OSError:
                await self.aclose()
                raise
            except HoldError as e:
                await self.aclose()
                raise e.to_os_error() from e
            except Exception as e:
                await self.aclose()
                raise OSError(f"Failed to read chunk: {e}") from e

            # Empty chunks carry nothing; keep pulling
            if chunk:
                self._bytes_read += len(chunk)
                return bytes(chunk)

    async def read_all(self) -> bytes:
        """Drain the stream into a single buffer.

        Starts a fresh iteration, so it raises ``StreamConsumedError`` once the
        stream has been iterated, even if only part of it was read.
        """
        buffer = bytearray()
        async for chunk in self:
            buffer.extend(chunk)
        return bytes(buffer)

    async def aclose(self) -> None:
        """Release the source without reading the remaining bytes."""
        if self._closed:
            return
        self._closed = True

        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()
        if self._on_close is not None:
            await self._on_close()
        logger.debug(f"Closed byte stream after {self._bytes_read} bytes")

    async def __aenter__(self) -> ByteStream:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"ByteStream({state}, bytes_read={self._bytes_read})"
