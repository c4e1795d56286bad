"""Error taxonomy shared by every provider.

Backend failures are classified into exactly one of three kinds before they
leave a provider. The original backend exception is always kept as the
``cause`` (and chained as ``__cause__``) so diagnostics survive the
translation.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Structured kind of a provider failure."""

    NOT_FOUND = "not_found"
    PROVIDER = "provider"
    BODY = "body"


class HoldError(Exception):
    """Base exception for provider failures."""

    kind: ErrorKind

    def to_os_error(self) -> OSError:
        """Convert to a generic I/O failure for callers that only handle OSError.

        The structured error stays reachable through ``__cause__``.
        """
        err = OSError(str(self))
        err.__cause__ = self
        return err


class NotFoundError(HoldError):
    """Raised when an identified resource does not exist where one was required."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, id: str, cause: BaseException | None = None):
        self.id = id
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"ID not found {id}{detail}")
        self.__cause__ = cause

    def to_os_error(self) -> OSError:
        err = FileNotFoundError(str(self))
        err.__cause__ = self
        return err


class ProviderError(HoldError):
    """Raised when the backend reports any failure other than absence."""

    kind = ErrorKind.PROVIDER

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Provider error: {cause}")
        self.__cause__ = cause


class BodyError(HoldError):
    """Raised when the backend succeeded but its payload could not be produced."""

    kind = ErrorKind.BODY

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Error while reading body: {message}")


# Caller misuse, never raised by a provider for a backend failure


class StreamConsumedError(RuntimeError):
    """Raised when a byte stream is iterated a second time."""

    pass


class BlobConsumedError(RuntimeError):
    """Raised when the content of a spent blob is requested again."""

    pass
