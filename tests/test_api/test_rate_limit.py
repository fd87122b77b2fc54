"""Tests for rate-limit state tracking."""

import pytest

from crossref_client.api.rate_limit import (
    STATE_CACHE_KEY,
    UNKNOWN,
    RateLimitProvider,
    RateLimitState,
    parse_interval,
)
from crossref_client.cache import MemoryCache


class TestParseInterval:
    """Tests for interval header parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1s", 1000),
            ("250ms", 250),
            ("2m", 120_000),
            ("1h", 3_600_000),
            ("5", 5000),
            (" 1S ", 1000),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_interval(value) == expected

    @pytest.mark.parametrize("value", ["", "soon", "1.5s", "-1s", "1d"])
    def test_invalid_values(self, value):
        assert parse_interval(value) is None


class TestRateLimitState:
    """Tests for RateLimitState."""

    def test_unknown_sentinel(self):
        assert UNKNOWN.is_known is False
        assert UNKNOWN.spacing == 0.0
        assert UNKNOWN.delay_at(1000.0) == 0.0

    def test_spacing(self):
        state = RateLimitState(interval_ms=1000, request_allowance=50)
        assert state.spacing == pytest.approx(0.02)

    def test_delay_before_spacing_elapsed(self):
        state = RateLimitState(interval_ms=1000, request_allowance=2, last_updated=100.0)
        assert state.delay_at(100.2) == pytest.approx(0.3)

    def test_no_delay_after_spacing_elapsed(self):
        state = RateLimitState(interval_ms=1000, request_allowance=2, last_updated=100.0)
        assert state.delay_at(101.0) == 0.0

    def test_no_delay_without_previous_request(self):
        state = RateLimitState(interval_ms=1000, request_allowance=2)
        assert state.delay_at(100.0) == 0.0

    def test_json_round_trip(self):
        state = RateLimitState(interval_ms=1000, request_allowance=50, last_updated=12.5)
        assert RateLimitState.model_validate_json(state.model_dump_json()) == state


class TestRateLimitProviderMemory:
    """Provider without a cache."""

    def test_starts_unknown(self):
        assert RateLimitProvider().get_state() is UNKNOWN

    def test_set_and_get(self):
        provider = RateLimitProvider()
        state = RateLimitState(interval_ms=1000, request_allowance=50)
        provider.set_state(state)
        assert provider.get_state() == state

    def test_update_from_headers(self):
        provider = RateLimitProvider()
        provider.update_from_headers({"X-Rate-Limit-Limit": "50", "X-Rate-Limit-Interval": "1s"})

        state = provider.get_state()
        assert state.request_allowance == 50
        assert state.interval_ms == 1000

    def test_update_keeps_last_request_time(self):
        provider = RateLimitProvider()
        provider.mark_request(42.0)
        provider.update_from_headers({"X-Rate-Limit-Limit": "10", "X-Rate-Limit-Interval": "1s"})
        assert provider.get_state().last_updated == 42.0

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"X-Rate-Limit-Limit": "50"},
            {"X-Rate-Limit-Interval": "1s"},
            {"X-Rate-Limit-Limit": "many", "X-Rate-Limit-Interval": "1s"},
            {"X-Rate-Limit-Limit": "0", "X-Rate-Limit-Interval": "1s"},
            {"X-Rate-Limit-Limit": "50", "X-Rate-Limit-Interval": "whenever"},
        ],
    )
    def test_missing_or_invalid_headers_are_ignored(self, headers):
        provider = RateLimitProvider()
        provider.update_from_headers(headers)
        assert provider.get_state().is_known is False

    def test_mark_request(self):
        provider = RateLimitProvider()
        provider.mark_request(123.0)
        assert provider.get_state().last_updated == 123.0


class TestRateLimitProviderCache:
    """Provider backed by a cache."""

    def test_state_is_written_to_cache(self, recording_cache):
        provider = RateLimitProvider(recording_cache)
        provider.set_state(RateLimitState(interval_ms=1000, request_allowance=50))

        keys = [key for key, _, _ in recording_cache.writes]
        assert keys == [STATE_CACHE_KEY]

    def test_state_is_shared_through_cache(self):
        cache = MemoryCache()
        RateLimitProvider(cache).update_from_headers(
            {"X-Rate-Limit-Limit": "50", "X-Rate-Limit-Interval": "1s"}
        )

        other = RateLimitProvider(cache)
        assert other.get_state().request_allowance == 50

    def test_cache_read_failure_falls_back_to_memory(self, broken_cache):
        state = RateLimitState(interval_ms=1000, request_allowance=5)
        provider = RateLimitProvider(broken_cache, state=state)
        assert provider.get_state() == state

    def test_cache_write_failure_is_not_raised(self, broken_cache):
        provider = RateLimitProvider(broken_cache)
        state = RateLimitState(interval_ms=1000, request_allowance=5)

        provider.set_state(state)

        assert provider._state == state

    def test_invalid_cached_state_is_ignored(self):
        cache = MemoryCache()
        cache.set(STATE_CACHE_KEY, b"not json", 60)
        provider = RateLimitProvider(cache)
        assert provider.get_state() is UNKNOWN
