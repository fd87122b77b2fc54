"""Rate-limit state tracking.

Crossref advertises its request window through the ``X-Rate-Limit-Limit``
and ``X-Rate-Limit-Interval`` response headers (e.g. ``50`` requests per
``1s``). The provider remembers the latest window and the time of the last
outbound request so the rate-limit interceptor can space calls out.

When a cache is configured the state is shared through it, which lets
several processes pointed at the same cache pace themselves together.
Writing the state is best effort: cache failures are logged and the
provider carries on with its in-memory copy.
"""

import re
from collections.abc import Mapping
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = structlog.get_logger(__name__)

STATE_CACHE_KEY = "crossref-client.rate-limit"
STATE_CACHE_TTL = 24 * 60 * 60

LIMIT_HEADER = "X-Rate-Limit-Limit"
INTERVAL_HEADER = "X-Rate-Limit-Interval"

_INTERVAL_RE = re.compile(r"^\s*(\d+)\s*(ms|s|m|h)?\s*$", re.IGNORECASE)
_UNIT_MS = {"ms": 1, "s": 1000, "m": 60_000, "h": 3_600_000}


class RateLimitState(BaseModel):
    """Last observed rate-limit window."""

    model_config = ConfigDict(frozen=True)

    interval_ms: Optional[int] = Field(None, ge=1)
    request_allowance: Optional[int] = Field(None, ge=1)
    last_updated: Optional[float] = Field(None, description="Epoch time of the last request")

    @property
    def is_known(self) -> bool:
        return self.interval_ms is not None and self.request_allowance is not None

    @property
    def spacing(self) -> float:
        """Minimum number of seconds between two requests."""
        if not self.is_known:
            return 0.0
        return self.interval_ms / self.request_allowance / 1000

    def delay_at(self, now: float) -> float:
        """Seconds to wait at ``now`` before the next request may go out."""
        if not self.is_known or self.last_updated is None:
            return 0.0
        return max(0.0, self.last_updated + self.spacing - now)


UNKNOWN = RateLimitState()


def parse_interval(value: str) -> Optional[int]:
    """Parse an interval header value into milliseconds.

    A bare number is read as seconds.

    Example:
        >>> parse_interval("1s")
        1000
        >>> parse_interval("250ms")
        250
    """
    match = _INTERVAL_RE.match(value)
    if not match:
        return None
    amount, unit = match.groups()
    return int(amount) * _UNIT_MS[(unit or "s").lower()]


class RateLimitProvider:
    """Reads and writes the rate-limit state, through the cache when there is one."""

    def __init__(self, cache: Optional[Any] = None, state: RateLimitState = UNKNOWN):
        """Initialize provider.

        Args:
            cache: Object with ``get(key)`` / ``set(key, value, ttl)``, or None
                to keep state in memory only
            state: Initial in-memory state
        """
        self.cache = cache
        self._state = state

    def get_state(self) -> RateLimitState:
        """Return the last known state, or ``UNKNOWN``."""
        if self.cache is None:
            return self._state

        try:
            raw = self.cache.get(STATE_CACHE_KEY)
        except Exception as e:
            logger.warning("rate_limit_state_read_failed", error=str(e))
            return self._state

        if raw is not None:
            try:
                self._state = RateLimitState.model_validate_json(raw)
            except ValidationError as e:
                logger.warning("rate_limit_state_invalid", error=str(e))

        return self._state

    def set_state(self, state: RateLimitState) -> None:
        """Store ``state`` in memory and, best effort, in the cache."""
        self._state = state
        if self.cache is None:
            return

        try:
            self.cache.set(STATE_CACHE_KEY, state.model_dump_json().encode(), STATE_CACHE_TTL)
        except Exception as e:
            logger.warning("rate_limit_state_write_failed", error=str(e))

    def mark_request(self, timestamp: float) -> None:
        """Record that a request is being sent at ``timestamp``."""
        state = self.get_state()
        self.set_state(state.model_copy(update={"last_updated": timestamp}))

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Update the window from response headers, if both are present and valid."""
        limit = headers.get(LIMIT_HEADER)
        interval = headers.get(INTERVAL_HEADER)
        if limit is None or interval is None:
            return

        interval_ms = parse_interval(interval)
        try:
            allowance = int(limit)
        except ValueError:
            allowance = 0
        if not interval_ms or allowance < 1:
            logger.debug("rate_limit_headers_ignored", limit=limit, interval=interval)
            return

        state = self.get_state()
        if state.interval_ms == interval_ms and state.request_allowance == allowance:
            return

        logger.debug("rate_limit_window_updated", interval_ms=interval_ms, allowance=allowance)
        self.set_state(
            state.model_copy(update={"interval_ms": interval_ms, "request_allowance": allowance})
        )
