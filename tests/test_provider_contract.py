"""Contract tests run against every shipped provider."""

from __future__ import annotations

import asyncio
import os

import pytest

from hold.core.blob import Blob
from hold.core.errors import ProviderError
from hold.core.stream import ByteStream


class TestProviderContract:
    """Behaviour every Provider implementation must share."""

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, provider):
        assert await provider.get_blob("missing") is None

    @pytest.mark.asyncio
    async def test_missing_key_is_not_present(self, provider):
        assert await provider.is_blob_present("missing") is False

    @pytest.mark.asyncio
    async def test_store_get_exists_delete_scenario(self, provider):
        stored = await provider.store_blob(Blob.from_bytes("a/b.txt", b"hello"))

        assert stored.key == "a/b.txt"
        assert stored.size == 5

        blob = await provider.get_blob("a/b.txt")
        assert blob is not None
        assert blob.key == "a/b.txt"
        assert blob.size == 5
        assert await blob.read() == b"hello"

        assert await provider.is_blob_present("a/b.txt") is True

        await provider.delete_blob("a/b.txt")

        assert await provider.get_blob("a/b.txt") is None
        assert await provider.is_blob_present("a/b.txt") is False

    @pytest.mark.asyncio
    async def test_delete_missing_key_succeeds(self, provider):
        await provider.delete_blob("never-stored")
        await provider.delete_blob("never-stored")

    @pytest.mark.asyncio
    async def test_round_trip_preserves_bytes(self, provider):
        data = os.urandom(200_000)
        await provider.store_blob(Blob.from_bytes("big.bin", data))

        blob = await provider.get_blob("big.bin")
        stream = blob.into_stream()
        read = await stream.read_all()

        assert stream.bytes_read == len(data)
        assert read == data

    @pytest.mark.asyncio
    async def test_store_streams_multiple_chunks(self, provider):
        chunks = [b"chunk-%d;" % i for i in range(50)]
        size = sum(len(c) for c in chunks)

        await provider.store_blob(Blob("chunked", size, ByteStream.from_chunks(chunks)))

        assert await (await provider.get_blob("chunked")).read() == b"".join(chunks)

    @pytest.mark.asyncio
    async def test_store_empty_payload(self, provider):
        await provider.store_blob(Blob.from_bytes("empty", b""))

        blob = await provider.get_blob("empty")

        assert blob.size == 0
        assert await blob.read() == b""

    @pytest.mark.asyncio
    async def test_store_overwrites(self, provider):
        await provider.store_blob(Blob.from_bytes("key", b"first"))
        await provider.store_blob(Blob.from_bytes("key", b"second!"))

        blob = await provider.get_blob("key")

        assert blob.size == 7
        assert await blob.read() == b"second!"

    @pytest.mark.asyncio
    async def test_store_consumes_the_blob(self, provider):
        blob = Blob.from_bytes("key", b"data")

        await provider.store_blob(blob)

        assert blob.consumed

    @pytest.mark.asyncio
    async def test_short_payload_is_rejected(self, provider):
        with pytest.raises(ProviderError):
            await provider.store_blob(Blob("short", 10, ByteStream.from_bytes(b"abc")))

        assert await provider.is_blob_present("short") is False

    @pytest.mark.asyncio
    async def test_failing_payload_surfaces_as_provider_error(self, provider):
        async def source():
            yield b"abc"
            raise ConnectionResetError("upstream went away")

        blob = Blob("broken", 6, ByteStream.from_async_iterable(source()))

        with pytest.raises(ProviderError) as exc_info:
            await provider.store_blob(blob)

        assert isinstance(exc_info.value.cause, OSError)
        assert await provider.is_blob_present("broken") is False

    @pytest.mark.asyncio
    async def test_empty_key_is_rejected(self, provider):
        with pytest.raises(ProviderError) as exc_info:
            await provider.get_blob("")

        assert isinstance(exc_info.value.cause, ValueError)

    @pytest.mark.asyncio
    async def test_rejected_key_releases_payload(self, provider):
        closed = []

        async def on_close():
            closed.append(True)

        stream = ByteStream.from_async_iterable(_chunks(b"payload"), on_close=on_close)

        with pytest.raises(ProviderError):
            await provider.store_blob(Blob("", 7, stream))

        assert stream.closed
        assert closed == [True]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["get_blob", "is_blob_present", "delete_blob"])
    async def test_nul_byte_key_fails_only_with_provider_error(self, provider, operation):
        # Providers may accept the key or reject it, but only as ProviderError
        try:
            await getattr(provider, operation)("a\x00b")
        except ProviderError as e:
            assert isinstance(e.cause, ValueError)

    @pytest.mark.asyncio
    async def test_concurrent_operations_on_distinct_keys(self, provider):
        keys = [f"k{i}" for i in range(10)]

        await asyncio.gather(
            *(provider.store_blob(Blob.from_bytes(k, k.encode())) for k in keys)
        )
        present = await asyncio.gather(*(provider.is_blob_present(k) for k in keys))

        assert all(present)

    @pytest.mark.asyncio
    async def test_provider_is_an_async_context_manager(self, provider):
        async with provider as p:
            assert await p.is_blob_present("missing") is False


async def _chunks(*chunks):
    for chunk in chunks:
        yield chunk
