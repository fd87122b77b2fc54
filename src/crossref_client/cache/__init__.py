"""Cache backends for responses and rate-limit state."""

from .base import CacheBackend, MemoryCache
from .disk import DiskCache

__all__ = [
    "CacheBackend",
    "MemoryCache",
    "DiskCache",
]
