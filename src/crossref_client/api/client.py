"""Crossref REST API client.

Crossref (api.crossref.org) serves bibliographic metadata for works,
journals, funders, members and more. No API key required.

The client builds the request URI, encodes ``filter``/``facet`` parameters,
and runs every call through a small interceptor pipeline that sets the
User-Agent, optionally caches responses, and paces requests to the rate
limit the API advertises.

A client's setters are not thread-safe; share an instance across threads
only with external locking around reconfiguration.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

import requests
import structlog

from .errors import ConfigurationError, DecodeError, TransportError
from .middleware import (
    DEFAULT_CACHE_TTL,
    RateLimitInterceptor,
    ResponseCacheInterceptor,
    UserAgentInterceptor,
)
from .params import encode_parameters
from .pipeline import Pipeline, RequestDescriptor
from .rate_limit import RateLimitProvider
from .uri import BASE_URI, build_uri

if TYPE_CHECKING:
    from ..config import Config

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass
class ClientConfig:
    """Settings owned by one client instance."""

    base_uri: str = BASE_URI
    version: Optional[str] = None
    user_agent: Optional[str] = None
    cache: Optional[Any] = None
    cache_ttl: int = DEFAULT_CACHE_TTL
    timeout: Optional[float] = DEFAULT_TIMEOUT


class CrossRefClient:
    """Client for the Crossref REST API."""

    BASE_URI = BASE_URI

    def __init__(
        self,
        user_agent: Optional[str] = None,
        cache: Optional[Any] = None,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        version: Optional[str] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        """Initialize client.

        Args:
            user_agent: Caller identification prepended to the User-Agent
                (Crossref asks for a project name and contact address)
            cache: Object with ``get(key)`` and ``set(key, value, ttl)``
                used for responses and rate-limit state
            cache_ttl: Upper bound in seconds for cached responses
            version: API version segment, e.g. ``"v1"``
            timeout: Request timeout in seconds

        Raises:
            ConfigurationError: If the cache, TTL or version is invalid
        """
        self.config = ClientConfig(timeout=timeout)
        self._pipeline = Pipeline()
        self._rate_limit = RateLimitProvider()
        self._owned_cache = None

        self.set_user_agent(user_agent)
        self.set_version(version)
        self.set_cache(cache, cache_ttl)

        self._session = requests.Session()

    @classmethod
    def from_config(cls, config: Optional["Config"] = None) -> "CrossRefClient":
        """Create a client from environment configuration.

        A disk cache is opened when ``CROSSREF_CACHE_DIR`` is set; the client
        owns it and closes it in ``close()``.
        """
        from ..cache import DiskCache
        from ..config import get_config

        config = config or get_config()
        cache = DiskCache(config.cache_dir) if config.has_cache() else None
        try:
            client = cls(
                user_agent=config.user_agent,
                cache=cache,
                cache_ttl=config.cache_ttl,
                version=config.api_version,
                timeout=config.timeout,
            )
        except ConfigurationError:
            if cache is not None:
                cache.close()
            raise
        client._owned_cache = cache
        return client

    # ========================================================================
    # Configuration
    # ========================================================================

    def set_user_agent(self, value: Optional[str]) -> None:
        """Set the caller part of the User-Agent header."""
        self.config.user_agent = value
        self._pipeline.install("user_agent", UserAgentInterceptor(value))

    def set_version(self, value: Optional[str]) -> None:
        """Set the API version prefixed to relative paths, or None for none."""
        if value is not None and (not value.strip() or "/" in value):
            raise ConfigurationError(f"Invalid API version: {value!r}")
        self.config.version = value

    def set_cache(self, cache: Optional[Any], ttl: int = DEFAULT_CACHE_TTL) -> None:
        """Enable response caching with ``cache``, or disable it with None.

        Rate-limit state moves to the new cache as well, so processes sharing
        a cache share the request window.
        """
        if cache is not None:
            if not (callable(getattr(cache, "get", None)) and callable(getattr(cache, "set", None))):
                raise ConfigurationError("Cache must provide get(key) and set(key, value, ttl)")
            if not isinstance(ttl, int) or isinstance(ttl, bool) or ttl < 0:
                raise ConfigurationError(f"Cache TTL must be a non-negative integer, got {ttl!r}")

        self.config.cache = cache
        self.config.cache_ttl = ttl

        if cache is None:
            self._pipeline.remove("cache")
        else:
            self._pipeline.install("cache", ResponseCacheInterceptor(cache, ttl))

        self._rate_limit = RateLimitProvider(cache, state=self._rate_limit.get_state())
        self._pipeline.install("rate_limit", RateLimitInterceptor(self._rate_limit))

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    @property
    def rate_limit(self) -> RateLimitProvider:
        return self._rate_limit

    # ========================================================================
    # Requests
    # ========================================================================

    def request(
        self,
        path: str,
        parameters: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Args:
            path: Relative (``works``) or absolute (``/v1/works``) path
            parameters: Query parameters; ``filter`` and ``facet`` may be
                mappings, e.g. ``{"filter": {"type": "journal-article"}}``
            timeout: Overrides the client timeout for this call

        Returns:
            The decoded JSON value

        Raises:
            TransportError: On a non-2xx status or a failed HTTP call
            DecodeError: If the body is not valid JSON
        """
        response = self._send(
            "GET",
            path,
            params=encode_parameters(parameters or {}),
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        self._raise_for_status(response)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON in response from {response.url}", body=response.text) from e

    def exists(self, path: str, timeout: Optional[float] = None) -> bool:
        """Check whether ``path`` exists with a HEAD request.

        Returns:
            True on 200, False on 404

        Raises:
            TransportError: On any other non-2xx status or a failed HTTP call
        """
        response = self._send("HEAD", path, timeout=timeout)
        if response.status_code == 404:
            return False

        self._raise_for_status(response)
        return response.status_code == 200

    def close(self) -> None:
        """Close the HTTP session and any cache opened by ``from_config``."""
        self._session.close()
        if self._owned_cache is not None:
            self._owned_cache.close()
            self._owned_cache = None

    def __enter__(self) -> "CrossRefClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ========================================================================
    # Internals
    # ========================================================================

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        request = RequestDescriptor(
            method=method,
            url=build_uri(path, self.config.version),
            params=params or {},
            headers=headers or {},
            timeout=timeout if timeout is not None else self.config.timeout,
        )

        try:
            return self._pipeline.handle(request, self._transport)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timed out: {request.url}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

    def _transport(self, request: RequestDescriptor) -> requests.Response:
        logger.debug("crossref_request", method=request.method, url=request.url, params=request.params)
        return self._session.request(
            request.method,
            request.url,
            params=request.params,
            headers=request.headers,
            timeout=request.timeout,
        )

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return
        raise TransportError(f"HTTP error: {status}", status_code=status, body=response.text)
