"""Crossref REST API client.

Provides the client facade and the pieces it is assembled from.
"""

from .client import ClientConfig, CrossRefClient
from .errors import ConfigurationError, CrossRefError, DecodeError, TransportError
from .params import encode_parameters
from .pipeline import Interceptor, Pipeline, RequestDescriptor
from .rate_limit import RateLimitProvider, RateLimitState
from .uri import BASE_URI, build_uri

__all__ = [
    "BASE_URI",
    "ClientConfig",
    "ConfigurationError",
    "CrossRefClient",
    "CrossRefError",
    "DecodeError",
    "Interceptor",
    "Pipeline",
    "RateLimitProvider",
    "RateLimitState",
    "RequestDescriptor",
    "TransportError",
    "build_uri",
    "encode_parameters",
]
