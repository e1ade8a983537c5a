"""Classified failures raised by the UV data-access layer."""

from __future__ import annotations


class UVGuardError(Exception):
    """Base exception for the package."""


class InvalidArgument(UVGuardError, ValueError):
    """Raised for bad caller input (e.g. coordinates). Never retried."""


class LocationPermissionDenied(InvalidArgument):
    """Raised when the geolocation provider reports a denied permission."""


class RequestTimeout(UVGuardError, TimeoutError):
    """Raised when the client-side request timeout aborts a provider call."""


class ProviderError(UVGuardError):
    """Raised when the UV provider answers with a non-success status or a malformed body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportFailure(UVGuardError):
    """Raised for any other transport-level failure talking to a remote."""


class StoreUnavailable(UVGuardError):
    """Raised when the document store cannot be reached (offline or disabled)."""

    code = "unavailable"


def is_store_unavailable(exc: BaseException) -> bool:
    """Return True if `exc` should be treated as a degraded-store outcome."""
    if isinstance(exc, StoreUnavailable):
        return True
    return getattr(exc, "code", None) == StoreUnavailable.code
