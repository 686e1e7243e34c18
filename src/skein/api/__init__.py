"""Plugin registry client module."""

from .client import RegistryClient
from .exceptions import (
    APIError,
    NotFoundError,
    NetworkError,
    ServerError,
    IndexFormatError,
)
from .models import RegistryIndex, RegistryIndexEntry

__all__ = [
    "RegistryClient",
    "APIError",
    "NotFoundError",
    "NetworkError",
    "ServerError",
    "IndexFormatError",
    "RegistryIndex",
    "RegistryIndexEntry",
]
