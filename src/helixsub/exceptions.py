"""Library exceptions for the helixsub package."""

from typing import Any


class HelixError(Exception):
    """Base exception for helixsub library."""

    pass


class GatewayError(HelixError):
    """
    Raised when a remote API call fails with a status code.

    Gateway implementations raise this for every non-success response.
    The library propagates it unchanged, except where a single-entity
    existence check translates a 404 into an absent result.

    Attributes:
        status_code: HTTP status code reported by the remote service
        message: Error message from the response body (or a reason phrase)
        method: HTTP method of the failed call, if known
        path: API path of the failed call, if known
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        method: str | None = None,
        path: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.method = method
        self.path = path
        target = f" ({method} {path})" if method and path else ""
        super().__init__(f"API call failed with status {status_code}{target}: {message}")

    @property
    def is_not_found(self) -> bool:
        """True if the remote service answered 404."""
        return self.status_code == 404


class DecodeError(HelixError):
    """
    Raised when a raw payload cannot be turned into a typed object.

    For event deliveries this error is reported for the single offending
    event and never interrupts dispatch to other subscriptions.
    """

    def __init__(self, kind: str, message: str, payload: Any = None) -> None:
        self.kind = kind
        self.payload = payload
        super().__init__(f"Could not decode {kind} payload: {message}")


class ConfigError(HelixError):
    """Raised when configuration or descriptor parameters are invalid."""

    pass
