"""Cache backend interface and an in-memory implementation."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class CacheBackend(ABC):
    """Key/value store with per-entry expiry.

    Used by the response cache and by the rate-limit state provider.
    Values are always bytes.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored value, or None if missing or expired."""

    @abstractmethod
    def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""

    def close(self) -> None:
        """Release any underlying resources."""


@dataclass
class _Entry:
    value: bytes
    expires_at: float


class MemoryCache(CacheBackend):
    """Process-local cache. Entries vanish with the process."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    def get(self, key: str) -> Optional[bytes]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if time.time() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: bytes, ttl: int) -> None:
        self._entries[key] = _Entry(value=value, expires_at=time.time() + ttl)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
