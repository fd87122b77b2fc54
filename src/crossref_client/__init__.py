"""Client for the Crossref REST API."""

__version__ = "0.1.0"

from .api import (
    ConfigurationError,
    CrossRefClient,
    CrossRefError,
    DecodeError,
    TransportError,
)
from .cache import CacheBackend, DiskCache, MemoryCache

__all__ = [
    "__version__",
    "CacheBackend",
    "ConfigurationError",
    "CrossRefClient",
    "CrossRefError",
    "DecodeError",
    "DiskCache",
    "MemoryCache",
    "TransportError",
]
