"""Tests for the error taxonomy."""

from __future__ import annotations

import pytest

from hold.core.errors import (
    BodyError,
    ErrorKind,
    HoldError,
    NotFoundError,
    ProviderError,
)


class TestErrorTaxonomy:
    """Test construction and chaining of provider errors."""

    def test_not_found_keeps_id_and_cause(self):
        cause = KeyError("missing")
        err = NotFoundError("a/b.txt", cause)

        assert err.id == "a/b.txt"
        assert err.cause is cause
        assert err.__cause__ is cause
        assert err.kind is ErrorKind.NOT_FOUND
        assert "a/b.txt" in str(err)

    def test_provider_error_keeps_cause(self):
        cause = ConnectionError("connection refused")
        err = ProviderError(cause)

        assert err.cause is cause
        assert err.__cause__ is cause
        assert err.kind is ErrorKind.PROVIDER
        assert str(err) == "Provider error: connection refused"

    def test_body_error_message(self):
        err = BodyError("no body found in S3 response")

        assert err.message == "no body found in S3 response"
        assert err.kind is ErrorKind.BODY
        assert str(err) == "Error while reading body: no body found in S3 response"

    @pytest.mark.parametrize(
        "err", [NotFoundError("k"), ProviderError(OSError("x")), BodyError("y")]
    )
    def test_all_kinds_share_a_base(self, err):
        assert isinstance(err, HoldError)


class TestOSErrorConversion:
    """Test conversion into generic I/O failures."""

    def test_not_found_maps_to_file_not_found(self):
        err = NotFoundError("key", LookupError("gone"))

        os_err = err.to_os_error()

        assert isinstance(os_err, FileNotFoundError)
        assert os_err.__cause__ is err

    @pytest.mark.parametrize("err", [ProviderError(TimeoutError("slow")), BodyError("empty")])
    def test_other_kinds_map_to_plain_os_error(self, err):
        os_err = err.to_os_error()

        assert type(os_err) is OSError
        assert os_err.__cause__ is err
        assert os_err.__cause__.kind is err.kind
