"""Interceptors installed in the client pipeline.

- ``UserAgentInterceptor``: sets the User-Agent header
- ``ResponseCacheInterceptor``: serves and stores GET responses
- ``RateLimitInterceptor``: spaces requests according to the last seen window
"""

import base64
import hashlib
import json
import time
from dataclasses import replace
from typing import Any, Optional

import requests
import structlog
from requests.structures import CaseInsensitiveDict
from requests.utils import default_user_agent, get_encoding_from_headers

from .. import __version__
from .pipeline import Handler, Interceptor, RequestDescriptor
from .rate_limit import RateLimitProvider

logger = structlog.get_logger(__name__)

CLIENT_IDENTIFIER = f"crossref-client/{__version__}"
DEFAULT_CACHE_TTL = 1200

# Statuses a shared cache may store without explicit freshness information.
CACHEABLE_STATUSES = frozenset({200, 203, 300, 301, 404, 410})
_UNCACHEABLE_DIRECTIVES = frozenset({"no-store", "no-cache", "private"})


# ============================================================================
# User-Agent
# ============================================================================


def compose_user_agent(user_agent: Optional[str] = None) -> str:
    """Join the caller's agent, the client identifier and the transport's agent."""
    parts = [user_agent, CLIENT_IDENTIFIER, default_user_agent()]
    return " ".join(part.strip() for part in parts if part and part.strip())


class UserAgentInterceptor(Interceptor):
    def __init__(self, user_agent: Optional[str] = None):
        self.user_agent = user_agent
        self.header = compose_user_agent(user_agent)

    def intercept(self, request: RequestDescriptor, call_next: Handler) -> requests.Response:
        headers = {**request.headers, "User-Agent": self.header}
        return call_next(replace(request, headers=headers))


# ============================================================================
# Response cache
# ============================================================================


def parse_cache_control(value: str) -> dict[str, str]:
    """Parse a Cache-Control header into a directive -> argument mapping.

    Example:
        >>> parse_cache_control('public, max-age="60"')
        {'public': '', 'max-age': '60'}
    """
    directives = {}
    for part in value.split(","):
        name, _, argument = part.strip().partition("=")
        if name:
            directives[name.lower()] = argument.strip().strip('"')
    return directives


def cache_key(request: RequestDescriptor) -> str:
    """Key identifying semantically equivalent requests.

    Query parameters are sorted, so ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}``
    share an entry.
    """
    params = sorted(request.params.items())
    url = requests.Request(request.method, request.url, params=params).prepare().url
    accept = request.headers.get("Accept", "")
    digest = hashlib.sha256(f"{request.method} {url} {accept}".encode()).hexdigest()
    return f"crossref-client.response.{digest}"


def serialize_response(response: requests.Response) -> bytes:
    return json.dumps({
        "status": response.status_code,
        "url": response.url,
        "headers": dict(response.headers),
        "body": base64.b64encode(response.content).decode("ascii"),
    }).encode()


def deserialize_response(raw: bytes) -> requests.Response:
    """Rebuild a ``requests.Response`` from ``serialize_response`` output."""
    data = json.loads(raw)
    response = requests.Response()
    response.status_code = data["status"]
    response.url = data["url"]
    response.headers = CaseInsensitiveDict(data["headers"])
    response.encoding = get_encoding_from_headers(response.headers)
    response._content = base64.b64decode(data["body"])
    return response


class ResponseCacheInterceptor(Interceptor):
    """Greedy cache for GET responses.

    Every cacheable GET response is stored for ``ttl`` seconds unless its
    Cache-Control header forbids storage; a shorter ``max-age`` wins over
    ``ttl``. Cache I/O errors never fail the request.
    """

    def __init__(self, cache: Any, ttl: int = DEFAULT_CACHE_TTL):
        self.cache = cache
        self.ttl = ttl

    def intercept(self, request: RequestDescriptor, call_next: Handler) -> requests.Response:
        if request.method.upper() != "GET":
            return call_next(request)

        key = cache_key(request)
        request_directives = parse_cache_control(request.headers.get("Cache-Control", ""))
        if "no-cache" not in request_directives and "no-store" not in request_directives:
            cached = self._lookup(key)
            if cached is not None:
                logger.debug("response_cache_hit", url=request.url)
                return cached

        logger.debug("response_cache_miss", url=request.url)
        response = call_next(request)

        ttl = self.storage_ttl(response)
        if ttl is not None and "no-store" not in request_directives:
            self._store(key, response, ttl)
        return response

    def storage_ttl(self, response: requests.Response) -> Optional[int]:
        """Seconds to keep ``response``, or None when it must not be stored."""
        if response.status_code not in CACHEABLE_STATUSES:
            return None

        directives = parse_cache_control(response.headers.get("Cache-Control", ""))
        if _UNCACHEABLE_DIRECTIVES & directives.keys():
            return None

        ttl = self.ttl
        for name in ("s-maxage", "max-age"):
            if name in directives:
                try:
                    ttl = min(ttl, int(directives[name]))
                except ValueError:
                    pass
                break

        return ttl if ttl > 0 else None

    def _lookup(self, key: str) -> Optional[requests.Response]:
        try:
            raw = self.cache.get(key)
        except Exception as e:
            logger.warning("response_cache_read_failed", error=str(e))
            return None

        if raw is None:
            return None

        try:
            return deserialize_response(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("response_cache_entry_invalid", key=key, error=str(e))
            return None

    def _store(self, key: str, response: requests.Response, ttl: int) -> None:
        try:
            self.cache.set(key, serialize_response(response), ttl)
        except Exception as e:
            logger.warning("response_cache_write_failed", error=str(e))
            return
        logger.debug("response_cache_stored", url=response.url, ttl=ttl)


# ============================================================================
# Rate limiting
# ============================================================================


class RateLimitInterceptor(Interceptor):
    """Waits out the last known rate-limit window before each request."""

    def __init__(self, provider: RateLimitProvider):
        self.provider = provider

    def intercept(self, request: RequestDescriptor, call_next: Handler) -> requests.Response:
        delay = self.provider.get_state().delay_at(time.time())
        if delay > 0:
            logger.debug("rate_limit_delay", seconds=round(delay, 3))
            time.sleep(delay)

        self.provider.mark_request(time.time())
        response = call_next(request)
        self.provider.update_from_headers(response.headers)
        return response
