"""Pytest configuration and shared fixtures.

Provides real ``requests.Response`` objects, a mocked HTTP session and
cache doubles for exercising the client without network access.
"""

import json
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from crossref_client.api import CrossRefClient
from crossref_client.cache import MemoryCache
from crossref_client.config import reset_config


# ============================================================================
# Response Helpers
# ============================================================================


def make_response(
    status_code: int = 200,
    json_data: Any = None,
    headers: Optional[dict] = None,
    content: Optional[bytes] = None,
    url: str = "https://api.crossref.org/works",
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.headers = CaseInsensitiveDict(headers or {})
    if content is None:
        content = json.dumps(json_data).encode() if json_data is not None else b""
    response._content = content
    response.encoding = "utf-8"
    return response


@pytest.fixture
def response_factory() -> Callable[..., requests.Response]:
    return make_response


# ============================================================================
# Cache Doubles
# ============================================================================


class RecordingCache(MemoryCache):
    """MemoryCache that records every set() call."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[tuple[str, bytes, int]] = []

    def set(self, key: str, value: bytes, ttl: int) -> None:
        self.writes.append((key, value, ttl))
        super().set(key, value, ttl)

    def response_writes(self) -> list[tuple[str, bytes, int]]:
        return [w for w in self.writes if w[0].startswith("crossref-client.response.")]


class BrokenCache:
    """Cache whose every operation fails."""

    def get(self, key):
        raise OSError("cache unavailable")

    def set(self, key, value, ttl):
        raise OSError("cache unavailable")


@pytest.fixture
def recording_cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def broken_cache() -> BrokenCache:
    return BrokenCache()


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def session() -> MagicMock:
    """Mocked requests.Session returning an empty JSON object."""
    session = MagicMock()
    session.request.return_value = make_response(json_data={})
    return session


@pytest.fixture
def client(session: MagicMock) -> CrossRefClient:
    """Client with its HTTP session replaced by a mock."""
    client = CrossRefClient()
    client._session = session
    return client


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from CROSSREF_* variables and the cached config."""
    for name in (
        "CROSSREF_USER_AGENT",
        "CROSSREF_API_VERSION",
        "CROSSREF_CACHE_DIR",
        "CROSSREF_CACHE_TTL",
        "CROSSREF_TIMEOUT",
        "CROSSREF_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
