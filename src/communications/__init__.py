"""Cached HTTP communication.

This package memoizes outbound HTTP calls for a bounded time window so that
repeated pipeline runs and tests do not hit slow, rate-limited external
services more often than necessary.
"""

from .cache import ResponseCache, CacheConfig, CacheEntry, CachedResponse
from .client import CachedHttpClient
from .exceptions import RequestFailedError
from .fingerprint import fingerprint, DEFAULT_KEY_HEADERS

__all__ = [
    "ResponseCache",
    "CacheConfig",
    "CacheEntry",
    "CachedResponse",
    "CachedHttpClient",
    "RequestFailedError",
    "fingerprint",
    "DEFAULT_KEY_HEADERS",
]
