"""Custom exception hierarchy for the relay proxy."""

from typing import Any


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class InvalidTargetURL(ProxyError):
    """Target URL is missing or not an absolute http(s) URL."""


class InvalidRequestBody(ProxyError):
    """Request body is not valid JSON or has the wrong shape."""


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit."""


class RelaySetupError(ProxyError):
    """Raised when the outbound request cannot be constructed."""


class UpstreamError(ProxyError):
    """Raised when an upstream returns a non-2xx response.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (optional)
        body: Decoded upstream body, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamUnavailableError(UpstreamError):
    """Raised when no response was received from the upstream."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None)


class UpstreamTimeoutError(UpstreamUnavailableError):
    """Raised when an upstream request times out."""


class UpstreamConnectionError(UpstreamUnavailableError):
    """Raised when unable to connect to an upstream."""
