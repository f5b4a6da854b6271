"""Error taxonomy for sentinel-explorer.

Every error raised by the library derives from `SentinelExplorerError` and carries
an `ErrorKind` tag, so callers can either catch a specific class or branch on
`error.kind`. Most classes also derive from the closest builtin exception
(ValueError, TypeError, FileNotFoundError) to stay compatible with generic handlers.
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_ARGUMENT = "invalid_argument"
    UNSUPPORTED_GEOMETRY = "unsupported_geometry"
    MALFORMED_GEOMETRY = "malformed_geometry"
    REMOTE_ERROR = "remote_error"
    EMPTY_RESULT = "empty_result"
    NOT_FOUND = "not_found"


class SentinelExplorerError(Exception):
    kind: ErrorKind


class InvalidArgument(SentinelExplorerError, ValueError):
    kind = ErrorKind.INVALID_ARGUMENT


class UnsupportedGeometry(SentinelExplorerError, TypeError):
    kind = ErrorKind.UNSUPPORTED_GEOMETRY


class MalformedGeometry(SentinelExplorerError, ValueError):
    kind = ErrorKind.MALFORMED_GEOMETRY


class RemoteError(SentinelExplorerError):
    """Non-success response from one of the Copernicus endpoints."""

    kind = ErrorKind.REMOTE_ERROR

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        message = super().__str__()
        if self.status_code is None:
            return message
        return f"{message} (status {self.status_code})"


class EmptyResult(SentinelExplorerError):
    kind = ErrorKind.EMPTY_RESULT


class NotFound(SentinelExplorerError, FileNotFoundError):
    kind = ErrorKind.NOT_FOUND
