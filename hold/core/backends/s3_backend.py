"""S3-compatible provider implementation on top of the MinIO client."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from minio import Minio
from minio.credentials import (
    AWSConfigProvider,
    ChainedProvider,
    EnvAWSProvider,
    EnvMinioProvider,
    IamAwsProvider,
)
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError

from hold.core.blob import Blob
from hold.core.errors import BodyError, ProviderError
from hold.core.provider import Provider, validate_key
from hold.core.stream import DEFAULT_CHUNK_SIZE, ByteStream

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "s3.amazonaws.com"

# Everything the client stack can raise for a failed call
_BACKEND_ERRORS = (MinioException, HTTPError, OSError, ValueError)

# Absence signals, per operation. Anything not listed is a ProviderError.
_GET_ABSENT_CODES = frozenset({"NoSuchKey"})
_HEAD_ABSENT_CODES = frozenset({"NoSuchKey"})
_HEAD_ABSENT_STATUS = 404
_HEAD_NOT_ABSENT_CODES = frozenset({"NoSuchBucket"})
_DELETE_ABSENT_CODES = frozenset({"NoSuchKey"})


@dataclass
class S3Credentials:
    """Static credentials for an S3-compatible service."""

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None


@dataclass
class S3Config:
    """Configuration for an S3 provider.

    Unset region and credentials fall back to the environment: region from
    ``AWS_REGION``/``AWS_DEFAULT_REGION`` (or bucket location lookup), and
    credentials from the AWS/MinIO environment variables, the AWS config
    files or the instance IAM role.
    """

    bucket: str
    endpoint: str | None = None
    region: str | None = None
    credentials: S3Credentials | None = None
    secure: bool = True
    create_bucket: bool = False


def _parse_endpoint(endpoint: str | None, secure: bool) -> tuple[str, bool]:
    """Split an endpoint override into host[:port] and TLS flag."""
    if not endpoint:
        return DEFAULT_ENDPOINT, secure

    parsed = urlparse(endpoint)
    if parsed.scheme in ("http", "https"):
        return parsed.netloc, parsed.scheme == "https"
    return endpoint, secure


def _default_credentials() -> ChainedProvider:
    return ChainedProvider(
        [
            EnvAWSProvider(),
            EnvMinioProvider(),
            AWSConfigProvider(),
            IamAwsProvider(),
        ]
    )


def _is_head_absent(err: S3Error) -> bool:
    if err.code in _HEAD_ABSENT_CODES:
        return True
    response = err.response
    status = getattr(response, "status", None)
    return status == _HEAD_ABSENT_STATUS and err.code not in _HEAD_NOT_ABSENT_CODES


class _StreamReader:
    """Blocking ``read(size)`` view over a ByteStream.

    The MinIO client reads request bodies synchronously, so uploads run in a
    worker thread and pull chunks from the event loop one at a time. Only
    usable from a thread other than the loop's.
    """

    def __init__(self, stream: ByteStream, loop: asyncio.AbstractEventLoop):
        self._iterator = stream.__aiter__()
        self._loop = loop
        self._buffer = bytearray()
        self._eof = False

    async def _pull(self) -> bytes | None:
        try:
            return await self._iterator.__anext__()
        except StopAsyncIteration:
            return None

    def read(self, size: int = -1) -> bytes:
        while not self._eof and (size < 0 or len(self._buffer) < size):
            chunk = asyncio.run_coroutine_threadsafe(self._pull(), self._loop).result()
            if chunk is None:
                self._eof = True
            else:
                self._buffer.extend(chunk)

        if size < 0 or size > len(self._buffer):
            size = len(self._buffer)
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data


class S3Provider(Provider):
    """Provider for S3-compatible object storage services.

    ``store_blob`` streams the payload without buffering it and returns an
    empty blob carrying key and size. Client calls are blocking and run in
    worker threads.
    """

    def __init__(self, config: S3Config, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize S3 provider.

        Args:
            config: Bucket, endpoint, region and credentials
            chunk_size: Chunk size used when streaming blobs out

        Raises:
            ProviderError: If ``create_bucket`` is set and the bucket check fails
        """
        self._bucket = config.bucket
        self._chunk_size = chunk_size

        endpoint, secure = _parse_endpoint(config.endpoint, config.secure)
        region = config.region or os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")

        client_args: dict[str, Any] = {
            "endpoint": endpoint,
            "secure": secure,
            "region": region,
        }
        if config.credentials is not None:
            client_args["access_key"] = config.credentials.access_key_id
            client_args["secret_key"] = config.credentials.secret_access_key
            client_args["session_token"] = config.credentials.session_token
        else:
            client_args["credentials"] = _default_credentials()

        self._client = Minio(**client_args)
        logger.info(f"Initialized S3 provider for bucket {self._bucket} at {endpoint}")

        if config.create_bucket:
            self._ensure_bucket(region)

    @classmethod
    def for_bucket(cls, bucket: str) -> S3Provider:
        """Create a provider with default endpoint, region and credentials."""
        return cls(S3Config(bucket=bucket))

    @property
    def bucket(self) -> str:
        return self._bucket

    def _ensure_bucket(self, region: str | None) -> None:
        try:
            if not self._client.bucket_exists(self._bucket):
                self._client.make_bucket(self._bucket, location=region)
                logger.info(f"Created bucket: {self._bucket}")
            else:
                logger.info(f"Using existing bucket: {self._bucket}")
        except _BACKEND_ERRORS as e:
            raise ProviderError(e) from e

    def _blob_from_response(self, key: str, response: Any) -> Blob:
        """Wrap a GetObject response body as a streaming blob."""
        if response is None:
            raise BodyError("no body found in S3 response")

        def _release() -> None:
            response.close()
            response.release_conn()

        content_length = response.headers.get("Content-Length")
        try:
            size = int(content_length)
        except (TypeError, ValueError):
            _release()
            raise BodyError(f"invalid Content-Length {content_length!r} in S3 response for {key}")

        return Blob(key, size, ByteStream.from_reader(response, self._chunk_size, close=_release))

    async def get_blob(self, key: str) -> Blob | None:
        validate_key(key)
        logger.debug(f"Fetching blob {key}")

        try:
            response = await asyncio.to_thread(
                self._client.get_object, bucket_name=self._bucket, object_name=key
            )
        except S3Error as e:
            if e.code in _GET_ABSENT_CODES:
                logger.debug(f"Blob {key} not found")
                return None
            raise ProviderError(e) from e
        except _BACKEND_ERRORS as e:
            raise ProviderError(e) from e

        return self._blob_from_response(key, response)

    async def store_blob(self, blob: Blob) -> Blob:
        size = blob.size

        async with blob.into_stream() as stream:
            key = validate_key(blob.key)
            logger.debug(f"Storing blob {key} of {size} bytes")

            reader = _StreamReader(stream, asyncio.get_running_loop())
            try:
                result = await asyncio.to_thread(
                    self._client.put_object,
                    bucket_name=self._bucket,
                    object_name=key,
                    data=reader,
                    length=size,
                )
            except _BACKEND_ERRORS as e:
                raise ProviderError(e) from e

        logger.info(f"Stored blob: {key} (etag: {getattr(result, 'etag', None)})")
        return Blob.empty(key, size)

    async def is_blob_present(self, key: str) -> bool:
        validate_key(key)
        logger.debug(f"Checking blob {key} presence")

        try:
            await asyncio.to_thread(
                self._client.stat_object, bucket_name=self._bucket, object_name=key
            )
        except S3Error as e:
            if _is_head_absent(e):
                logger.debug(f"Blob {key} not found")
                return False
            raise ProviderError(e) from e
        except _BACKEND_ERRORS as e:
            raise ProviderError(e) from e

        logger.debug(f"Blob {key} found")
        return True

    async def delete_blob(self, key: str) -> None:
        validate_key(key)
        logger.debug(f"Deleting blob {key}")

        try:
            await asyncio.to_thread(
                self._client.remove_object, bucket_name=self._bucket, object_name=key
            )
        except S3Error as e:
            if e.code in _DELETE_ABSENT_CODES:
                logger.debug(f"Blob {key} already absent")
                return
            raise ProviderError(e) from e
        except _BACKEND_ERRORS as e:
            raise ProviderError(e) from e

        logger.info(f"Deleted blob: {key}")

    def __repr__(self) -> str:
        return f"S3Provider(bucket={self._bucket!r})"
