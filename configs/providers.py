"""Storage provider configuration.

This module defines the CONFIGURATION dict which maps provider names to their
connection parameters. Users can customize this file or point the registry
at their own config module.

Configuration location: configs/providers.py

Example usage:
    from hold.core.store import BlobStore

    # Use named provider
    store = BlobStore.from_name("local")

    # Use with namespace (keys are stored under "images/thumbnails/")
    store = BlobStore.from_name("local.images.thumbnails")

Environment overrides:
    # Switch the default provider between filesystem and S3
    export HOLD_DEFAULT_PROVIDER=s3

Configuration inheritance:
    "s3": {"type": "s3", "bucket": "hold-data", ...},
    "s3-eu": {
        "__inherits__": "s3",   # Inherits all settings from s3
        "region": "eu-west-1",  # Override only the region
    }

Unset S3 endpoint, region or credentials fall back to the client's own
resolution (AWS_* / MINIO_* variables, ~/.aws files, instance role).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from hold.core.utils.env import env_flag, load_env_file_if_present

load_env_file_if_present()  # Load .env file if present
PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _resolve_default_base_path() -> Path:
    """Return the default filesystem storage root."""
    configured_path = os.environ.get("HOLD_STORAGE_PATH")
    if configured_path:
        return Path(configured_path).expanduser()

    return PROJECT_ROOT / "var" / "blobs"


DEFAULT_BASE_PATH = _resolve_default_base_path()


def _build_s3_config() -> dict[str, Any]:
    """Return an S3 provider configuration from the environment."""
    config: dict[str, Any] = {
        "type": "s3",
        "bucket": os.getenv("HOLD_S3_BUCKET", "hold-data"),
        "endpoint": os.getenv("HOLD_S3_ENDPOINT"),
        "region": os.getenv("HOLD_S3_REGION"),
        "create_bucket": env_flag("HOLD_S3_CREATE_BUCKET"),
    }
    access_key = os.getenv("HOLD_S3_ACCESS_KEY")
    secret_key = os.getenv("HOLD_S3_SECRET_KEY")
    if access_key and secret_key:
        config["access_key"] = access_key
        config["secret_key"] = secret_key
    return config


def _build_default_config() -> dict[str, Any]:
    """Determine the configuration of the default provider."""
    provider_type = os.getenv("HOLD_DEFAULT_PROVIDER", "filesystem").strip().lower()
    if provider_type == "s3":
        return _build_s3_config()
    if provider_type == "memory":
        return {"type": "memory"}

    return {
        "type": "filesystem",
        "base_path": str(DEFAULT_BASE_PATH),
    }


CONFIGURATION = {
    # Provider used by the CLI when none is given
    "default": _build_default_config(),
    # Local filesystem directory
    "local": {
        "type": "filesystem",
        "base_path": str(DEFAULT_BASE_PATH),
    },
    # S3-compatible object storage
    "s3": _build_s3_config(),
    # Local MinIO server for development
    "minio-local": {
        "__inherits__": "s3",
        "endpoint": os.getenv("MINIO_ENDPOINT", "http://localhost:9000"),
        "access_key": os.getenv("MINIO_ACCESS_KEY", "minioadmin"),
        "secret_key": os.getenv("MINIO_SECRET_KEY", "minioadmin"),
        "create_bucket": True,
    },
    # Process-local scratch space
    "memory": {
        "type": "memory",
    },
}
