"""Blob: an identified, sized, lazily-streamed binary payload."""

from __future__ import annotations

from hold.core.errors import BlobConsumedError
from hold.core.stream import ByteStream


class Blob:
    """A blob is an object that can be stored onto a provider.

    The key is a generic unique identifier that roughly maps to a file path in
    a traditional filesystem. The size is the declared payload length in bytes
    and is never checked against the stream here; providers surface a mismatch
    when they detect one.

    The content can be taken out exactly once. A caller wanting to store the
    same payload twice must build a second blob.

    Examples:
        >>> blob = Blob.from_bytes("a/b.txt", b"hello")
        >>> blob.key, blob.size
        ('a/b.txt', 5)
        >>> data = await blob.read()
    """

    __slots__ = ("_key", "_size", "_content")

    def __init__(self, key: str, size: int, content: ByteStream):
        """Initialize a blob.

        Args:
            key: Caller-assigned identifier
            size: Declared total byte length of the payload
            content: Stream producing the payload
        """
        self._key = key
        self._size = size
        self._content: ByteStream | None = content

    @classmethod
    def from_bytes(cls, key: str, data: bytes) -> Blob:
        """Build a blob from an in-memory buffer; the size is the buffer length."""
        return cls(key, len(data), ByteStream.from_bytes(data))

    @classmethod
    def empty(cls, key: str, size: int = 0) -> Blob:
        """Build a payload-less blob that only carries key and size.

        Providers return these from ``store_blob`` when they do not echo the
        stored bytes back.
        """
        return cls(key, size, ByteStream.empty())

    @property
    def key(self) -> str:
        return self._key

    @property
    def size(self) -> int:
        return self._size

    @property
    def consumed(self) -> bool:
        """Whether the content has already been taken out."""
        return self._content is None

    def into_stream(self) -> ByteStream:
        """Hand over the content stream. The blob is spent afterwards.

        Raises:
            BlobConsumedError: If the content was already taken
        """
        if self._content is None:
            raise BlobConsumedError(f"Content of blob {self._key} has already been consumed")
        content, self._content = self._content, None
        return content

    async def read(self) -> bytes:
        """Consume the content and return it as bytes."""
        return await self.into_stream().read_all()

    async def discard(self) -> None:
        """Release the content without reading it, if it was not taken yet."""
        if self._content is not None:
            await self.into_stream().aclose()

    def __repr__(self) -> str:
        return f"Blob(key={self._key!r}, size={self._size}, consumed={self.consumed})"
