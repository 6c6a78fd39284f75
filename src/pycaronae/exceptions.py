"""Custom exception hierarchy for pycaronae."""

from __future__ import annotations


class CaronaeError(Exception):
    """Base exception for all pycaronae errors."""


class CaronaeConfigError(CaronaeError):
    """Invalid or missing configuration."""


class CaronaeTransportError(CaronaeError):
    """Remote call failed (network, non-2xx, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class CaronaeDecodeError(CaronaeError):
    """Response payload did not have the expected shape.

    Raised when the remote answered successfully but the body is not a
    list where a list of records was expected, or a required field is
    missing.  No local mutation is attempted when this is raised.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class CaronaeStoreError(CaronaeError):
    """Local store transaction failed to open or commit."""


class CaronaeNotAuthenticatedError(CaronaeError):
    """No current user is available for an operation that needs one."""
