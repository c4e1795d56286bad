"""Provider-agnostic blob storage.

This package provides:
- ``Blob`` and ``ByteStream``: identified, sized, single-pass payloads
- ``Provider``: the async get/store/exists/delete contract
- Memory, filesystem and S3-compatible providers, plus a named registry

Note: listing, multi-part uploads and metadata beyond key and size are out of scope.
"""

__all__ = ["core", "cli"]
