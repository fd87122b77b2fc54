"""Tests for the diskcache-backed cache."""

import pytest

from crossref_client.cache import CacheBackend, DiskCache


@pytest.fixture
def disk_cache(tmp_path):
    cache = DiskCache(tmp_path / "cache")
    yield cache
    cache.close()


class TestDiskCache:
    """Tests for DiskCache."""

    def test_is_cache_backend(self, disk_cache):
        assert isinstance(disk_cache, CacheBackend)

    def test_creates_directory(self, tmp_path):
        cache = DiskCache(tmp_path / "nested" / "cache")
        try:
            assert (tmp_path / "nested" / "cache").is_dir()
        finally:
            cache.close()

    def test_get_missing(self, disk_cache):
        assert disk_cache.get("missing") is None

    def test_set_and_get(self, disk_cache):
        disk_cache.set("key", b"value", 60)
        assert disk_cache.get("key") == b"value"

    def test_persists_across_instances(self, tmp_path):
        first = DiskCache(tmp_path)
        first.set("key", b"value", 60)
        first.close()

        second = DiskCache(tmp_path)
        try:
            assert second.get("key") == b"value"
        finally:
            second.close()

    def test_clear(self, disk_cache):
        disk_cache.set("key", b"value", 60)
        disk_cache.clear()
        assert disk_cache.get("key") is None
