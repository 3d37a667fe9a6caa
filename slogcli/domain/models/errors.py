"""Error types raised by the Sentry API layer and the configuration loader."""

from typing import Optional


class ApiError(Exception):
    """A request to the Sentry API did not produce a usable response.

    Attributes:
        status_code: HTTP status, or 0 when no response was received.
        body: Raw response body text (empty when there was no response).
        message: Human-readable summary.
    """

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class TransportError(ApiError):
    """Connection, DNS or timeout failure. Never retried."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, status_code=0)
        self.cause = cause


class DecodeError(ApiError):
    """A 2xx response whose body is not the expected JSON shape."""


class RateLimitExceeded(Exception):
    """HTTP 429 from the server. Handled inside the request executor only."""

    def __init__(self, retry_after_seconds: int):
        super().__init__(f"Rate limited; retry after {retry_after_seconds}s")
        self.retry_after_seconds = retry_after_seconds


class ConfigurationError(Exception):
    """Required settings (auth token, organization) are missing."""
