from __future__ import annotations

from io import BytesIO
from unittest.mock import Mock, patch

import pytest
from minio.error import S3Error

from hold.core.backends import (
    FilesystemProvider,
    MemoryProvider,
    S3Config,
    S3Credentials,
    S3Provider,
)


def make_s3_error(code: str, status: int | None = None) -> S3Error:
    """Build an S3Error the way the MinIO client raises it."""
    response = Mock(status=status) if status is not None else None
    return S3Error(
        code=code,
        message=f"{code} raised by test",
        resource="/test-bucket/key",
        request_id="",
        host_id="",
        response=response,
    )


class FakeResponse:
    """Stand-in for the urllib3 response returned by ``Minio.get_object``."""

    def __init__(self, data: bytes, headers: dict[str, str] | None = None):
        self._body = BytesIO(data)
        self.headers = headers if headers is not None else {"Content-Length": str(len(data))}
        self.closed = False
        self.released = False

    def read(self, amt: int | None = None) -> bytes:
        return self._body.read(amt)

    def close(self) -> None:
        self.closed = True

    def release_conn(self) -> None:
        self.released = True


class FakeMinio:
    """In-memory stand-in for the MinIO client, behaving like S3."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.responses: list[FakeResponse] = []

    def get_object(self, bucket_name: str, object_name: str) -> FakeResponse:
        if object_name not in self.objects:
            raise make_s3_error("NoSuchKey", 404)
        response = FakeResponse(self.objects[object_name])
        self.responses.append(response)
        return response

    def put_object(self, bucket_name: str, object_name: str, data, length: int, **kwargs):
        payload = data.read(length)
        if len(payload) != length:
            raise OSError(
                f"stream having not enough data; expected: {length}, got: {len(payload)} bytes"
            )
        self.objects[object_name] = payload
        return Mock(etag="etag-" + object_name)

    def stat_object(self, bucket_name: str, object_name: str):
        if object_name not in self.objects:
            # HEAD responses carry no body, so the client only sees the status
            raise make_s3_error("NoSuchKey", 404)
        return Mock(size=len(self.objects[object_name]))

    def remove_object(self, bucket_name: str, object_name: str) -> None:
        self.objects.pop(object_name, None)


@pytest.fixture
def fake_minio():
    return FakeMinio()


@pytest.fixture
def s3_provider(fake_minio):
    """S3 provider talking to the in-memory fake client."""
    with patch("hold.core.backends.s3_backend.Minio", return_value=fake_minio):
        provider = S3Provider(
            S3Config(
                bucket="test-bucket",
                credentials=S3Credentials("test_key", "test_secret"),
            )
        )
    return provider


@pytest.fixture(params=["memory", "filesystem", "s3"])
def provider(request, tmp_path, fake_minio):
    """Every shipped provider, for contract tests."""
    if request.param == "memory":
        return MemoryProvider()
    if request.param == "filesystem":
        return FilesystemProvider(base_path=tmp_path / "blobs")
    return request.getfixturevalue("s3_provider")


@pytest.fixture
def s3_error():
    """Factory for S3Error instances."""
    return make_s3_error
