#!/usr/bin/env python
"""Demo script for named providers and dotted namespaces."""

from __future__ import annotations

import asyncio
import tempfile

from hold.core import BlobStore, ProviderRegistry


async def demo_basic_usage(registry: ProviderRegistry):
    """Store and read back a blob through a named provider."""
    print("=" * 70)
    print("Demo 1: Basic Named Provider Usage")
    print("=" * 70)

    store = BlobStore(registry.get_provider("dev"))

    await store.put_bytes("hello.txt", b"Hello from named provider!")
    print("   ✓ Stored 'hello.txt'")

    data = await store.get_bytes("hello.txt")
    print(f"   ✓ Retrieved: {data.decode()}")
    print(f"   ✓ Provider: {store.provider!r}")


async def demo_namespaced_providers(registry: ProviderRegistry):
    """Dotted names resolve to key prefixes on the same base provider."""
    print("\n" + "=" * 70)
    print("Demo 2: Hierarchical Namespacing")
    print("=" * 70)

    images = BlobStore(registry.get_provider("dev.images"))
    thumbnails = BlobStore(registry.get_provider("dev.images.thumbnails"))

    await images.put_bytes("photo.jpg", b"photo data")
    await thumbnails.put_bytes("photo_thumb.jpg", b"thumbnail data")
    print("   ✓ Stored photo.jpg in 'dev.images'")
    print("   ✓ Stored photo_thumb.jpg in 'dev.images.thumbnails'")

    base = BlobStore(registry.get_provider("dev"))
    for key in ["images/photo.jpg", "images/thumbnails/photo_thumb.jpg", "photo.jpg"]:
        print(f"   {'✓' if await base.exists(key) else '✗'} 'dev' sees {key}")

    await images.delete("photo.jpg")
    await images.delete("photo.jpg")
    print("   ✓ Deleted photo.jpg twice (second delete is a no-op)")


async def main():
    with tempfile.TemporaryDirectory() as tmpdir:
        registry = ProviderRegistry(
            {
                "dev": {"type": "filesystem", "base_path": tmpdir},
                "scratch": {"type": "memory"},
            }
        )
        print(f"Available providers: {', '.join(registry.list_providers())}\n")
        await demo_basic_usage(registry)
        await demo_namespaced_providers(registry)


if __name__ == "__main__":
    asyncio.run(main())
