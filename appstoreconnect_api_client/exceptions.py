"""
Custom exception types for the App Store Connect API client.

These exceptions allow callers to distinguish between failures
occurring while signing the authentication token, failures of the
network transport, and rejections reported by the App Store Connect
servers themselves.  The client never retries; every error is raised
to the immediate caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:  # pragma: no cover
    from .models import ServerError


class AppStoreConnectError(Exception):
    """Base exception for all App Store Connect client errors."""


class InvalidKeyError(AppStoreConnectError):
    """Raised when the private key is not a usable P-256 EC private key."""


class SigningError(AppStoreConnectError):
    """Raised when the ES256 signing primitive fails."""


class TransportError(AppStoreConnectError):
    """Raised on network-level failures (DNS, TLS, connection reset, timeout)."""


class ApiError(AppStoreConnectError):
    """Raised when the API responds with a non-2xx status and an error envelope.

    Attributes
    ----------
    status : int
        The HTTP status code of the response.
    errors : list of ServerError
        The entries of the ``errors`` array, in the order returned.
    """

    def __init__(self, status: int, errors: List["ServerError"]) -> None:
        self.status = status
        self.errors = list(errors)
        summary = "; ".join(
            f"{err.code}: {err.detail or err.title}" for err in self.errors
        )
        super().__init__(f"{status} Error: {summary}" if summary else f"{status} Error")

    @property
    def codes(self) -> List[str]:
        return [err.code for err in self.errors]


class DecodeError(AppStoreConnectError):
    """Raised when a response body does not match the expected shape."""

    def __init__(self, status: int, body: str, reason: str = "") -> None:
        self.status = status
        self.body = body
        self.reason = reason
        # Truncate to keep messages readable
        preview = body[:200] if body else "<empty>"
        message = f"Could not decode response with status {status}: {preview}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
