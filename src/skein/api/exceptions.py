"""
Custom exceptions for the skein registry client.
"""

from typing import Any


class APIError(Exception):
    """Base exception for registry and download errors."""

    def __init__(self, message: str = "", status_code: int | None = None,
                 response_data: dict[str, Any] | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}
        self.url = url


class NotFoundError(APIError):
    """The requested document doesn't exist (404)."""
    pass


class NetworkError(APIError):
    """Network-related errors (timeouts, connection issues)."""
    pass


class ServerError(APIError):
    """Server-side errors (500, 502, etc.)."""
    pass


class IndexFormatError(APIError):
    """The plugin index document couldn't be parsed."""
    pass
