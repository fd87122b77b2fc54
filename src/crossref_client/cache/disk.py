"""Persistent cache backed by diskcache.

Lets several processes share cached responses and the rate-limit
window through one directory.
"""

from pathlib import Path
from typing import Optional, Union

import diskcache

from .base import CacheBackend


class DiskCache(CacheBackend):
    """CacheBackend stored in a diskcache directory."""

    def __init__(self, directory: Union[str, Path]):
        """Open (or create) the cache directory.

        Args:
            directory: Filesystem path for the cache database
        """
        self.directory = Path(directory).expanduser()
        self._cache = diskcache.Cache(str(self.directory))

    def get(self, key: str) -> Optional[bytes]:
        return self._cache.get(key)

    def set(self, key: str, value: bytes, ttl: int) -> None:
        self._cache.set(key, value, expire=ttl)

    def clear(self) -> None:
        self._cache.clear()

    def close(self) -> None:
        self._cache.close()
