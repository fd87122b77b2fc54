"""Exceptions raised by the Crossref client."""

from typing import Optional


class CrossRefError(Exception):
    """Base exception for Crossref client errors."""

    pass


class TransportError(CrossRefError):
    """Raised on a non-2xx response or when the HTTP call itself fails.

    ``status_code`` is ``None`` when no response was received
    (connection error, timeout).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class DecodeError(CrossRefError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, message: str, body: Optional[str] = None):
        self.body = body
        super().__init__(message)


class ConfigurationError(CrossRefError):
    """Raised for invalid cache, TTL or version settings."""

    pass
