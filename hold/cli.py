#!/usr/bin/env python
"""Command line access to configured storage providers."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from hold.core.blob import Blob
from hold.core.errors import HoldError
from hold.core.provider import Provider
from hold.core.registry import (
    ProviderConfigError,
    ProviderNotFoundError,
    ProviderRegistry,
    get_default_registry,
)
from hold.core.stream import ByteStream
from hold.core.utils.config import ConfigError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ABSENT = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hold", description="Get, store, check and delete blobs")
    parser.add_argument(
        "--provider", default="default", help="Provider name, optionally dotted (e.g. local.images)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="Write a blob to FILE (or stdout)")
    get.add_argument("key")
    get.add_argument("file", nargs="?", help="Destination file (default: stdout)")

    put = sub.add_parser("put", help="Store FILE (or stdin) under KEY")
    put.add_argument("key")
    put.add_argument("file", nargs="?", help="Source file (default: stdin)")

    exists = sub.add_parser("exists", help="Check whether KEY exists")
    exists.add_argument("key")

    delete = sub.add_parser("delete", help="Delete KEY (missing keys are ignored)")
    delete.add_argument("key")

    return parser


async def _get(provider: Provider, key: str, file: str | None) -> int:
    blob = await provider.get_blob(key)
    if blob is None:
        print(f"Blob not found: {key}", file=sys.stderr)
        return EXIT_ABSENT

    async with blob.into_stream() as stream:
        if not file:
            async for chunk in stream:
                sys.stdout.buffer.write(chunk)
            sys.stdout.buffer.flush()
            return EXIT_OK

        path = Path(file)
        with open(path, "wb") as f:
            try:
                async for chunk in stream:
                    f.write(chunk)
            except Exception:
                # Never leave a partial download behind
                f.close()
                path.unlink(missing_ok=True)
                raise
    return EXIT_OK


async def _put(provider: Provider, key: str, file: str | None) -> int:
    if file:
        path = Path(file)
        size = path.stat().st_size
        blob = Blob(key, size, ByteStream.from_reader(open(path, "rb")))
    else:
        blob = Blob.from_bytes(key, sys.stdin.buffer.read())

    try:
        stored = await provider.store_blob(blob)
    finally:
        await blob.discard()
    print(f"Stored {stored.key} ({stored.size} bytes)")
    return EXIT_OK


async def _exists(provider: Provider, key: str) -> int:
    present = await provider.is_blob_present(key)
    print("true" if present else "false")
    return EXIT_OK if present else EXIT_ABSENT


async def _delete(provider: Provider, key: str) -> int:
    await provider.delete_blob(key)
    print(f"Deleted {key}")
    return EXIT_OK


async def run(args: argparse.Namespace, provider: Provider) -> int:
    if args.command == "get":
        return await _get(provider, args.key, args.file)
    if args.command == "put":
        return await _put(provider, args.key, args.file)
    if args.command == "exists":
        return await _exists(provider, args.key)
    return await _delete(provider, args.key)


def main(argv: list[str] | None = None, registry: ProviderRegistry | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        provider = (registry or get_default_registry()).get_provider(args.provider)
        return asyncio.run(run(args, provider))
    except (HoldError, OSError, ConfigError, ProviderConfigError, ProviderNotFoundError) as e:
        logger.debug(f"{args.command} {args.key} failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
