"""
Exception hierarchy for the device policy SDK.

Every failure is raised as a subclass of `DevicePolicyError`. Network and HTTP
failures are `TransportError`s; responses whose body does not match the
expected JSON shape raise `DecodeError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class DevicePolicyError(Exception):
    """Base class for all SDK errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Transport errors
# =============================================================================


class TransportError(DevicePolicyError):
    """
    The request could not be completed, or the server rejected it.

    Attributes:
        status_code: HTTP status code, when a response was received
        errors: Error entries from the response envelope (``code``/``message``)
        response_body: Raw response body, when available
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errors: Sequence[dict[str, Any]] | None = None,
        response_body: bytes | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.errors: list[dict[str, Any]] = list(errors or [])
        self.response_body = response_body

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"[{self.status_code}] {self.message}"


class NetworkError(TransportError):
    """Connection-level failure (DNS, refused connection, reset, ...)."""


class RequestTimeoutError(TransportError):
    """The request did not complete within the configured timeout."""


class AuthenticationError(TransportError):
    """401 - missing or invalid API token."""


class AuthorizationError(TransportError):
    """403 - the token lacks permission for this resource."""


class NotFoundError(TransportError):
    """404 - the account, zone or policy does not exist."""


class RateLimitError(TransportError):
    """429 - too many requests."""


class ServerError(TransportError):
    """5xx - server-side failure."""


class APIError(TransportError):
    """Any other rejected request, including 2xx envelopes with ``success: false``."""


# =============================================================================
# Decode errors
# =============================================================================


class DecodeError(DevicePolicyError):
    """Response bytes are not valid JSON or do not match the expected shape."""

    def __init__(self, message: str, *, shape: str | None = None, body: bytes | None = None):
        super().__init__(message)
        self.shape = shape
        self.body = body


# =============================================================================
# Client policy errors
# =============================================================================


class WriteNotAllowedError(DevicePolicyError):
    """A write was attempted while the client's write policy is DENY."""

    def __init__(self, message: str, *, method: str, url: str):
        super().__init__(message)
        self.method = method
        self.url = url


_STATUS_ERRORS: dict[int, type[TransportError]] = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    429: RateLimitError,
}


def error_for_status(
    status_code: int,
    message: str,
    *,
    errors: Sequence[dict[str, Any]] | None = None,
    response_body: bytes | None = None,
) -> TransportError:
    """Build the `TransportError` subclass matching an HTTP status code."""
    cls = _STATUS_ERRORS.get(status_code)
    if cls is None:
        cls = ServerError if status_code >= 500 else APIError
    return cls(message, status_code=status_code, errors=errors, response_body=response_body)
