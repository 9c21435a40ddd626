"""Response cache for outbound HTTP requests.

This module implements a time-bounded cache of HTTP responses. It avoids
repeated calls to slow, rate-limited external QA services when the same
request is issued again within the configured time window.

Expiry is evaluated lazily on lookup; there is no background eviction. The
cache is safe to share between threads: every read and write is atomic, but
two concurrent misses for the same key both reach the upstream service.
"""

import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from src.utils.exceptions import ConfigurationError
from src.utils.logging import LoggerMixin


@dataclass
class CacheConfig:
    """Configuration for the response cache."""

    enabled: bool = True
    ttl_seconds: float = 300.0  # 5 minutes default
    max_size: int = 1000

    def __post_init__(self):
        if self.ttl_seconds <= 0:
            raise ConfigurationError(
                f"Cache TTL must be positive, got {self.ttl_seconds}",
                invalid_values={"ttl_seconds": self.ttl_seconds}
            )
        if self.max_size < 1:
            raise ConfigurationError(
                f"Cache max_size must be at least 1, got {self.max_size}",
                invalid_values={"max_size": self.max_size}
            )


@dataclass(frozen=True)
class CachedResponse:
    """Immutable snapshot of an HTTP response."""

    status_code: int
    headers: Tuple[Tuple[str, str], ...]
    content: bytes
    url: str = ""

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding, errors="replace")

    @property
    def encoding(self) -> str:
        content_type = self.header("content-type") or ""
        for part in content_type.split(";")[1:]:
            name, _, value = part.strip().partition("=")
            if name.lower() == "charset" and value:
                return value.strip('"')
        return "utf-8"

    def header(self, name: str) -> Optional[str]:
        """Return the first header value with the given name (case-insensitive)."""
        name = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == name:
                return value
        return None

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.text)


@dataclass(frozen=True)
class CacheEntry:
    """Cache entry holding a stored response and its creation time."""

    key: str
    response: CachedResponse
    created_at: float


class ResponseCache(LoggerMixin):
    """Time-bounded key/value store for HTTP responses.

    Besides the stored entries the cache keeps three monotonically increasing
    counters: lookups that hit, lookups that missed and requests that were
    actually executed against the upstream service.
    """

    def __init__(self, config: CacheConfig, clock: Callable[[], float] = time.monotonic):
        """Initialize the response cache.

        Args:
            config: Cache configuration settings
            clock: Source of the current time in seconds
        """
        self.config = config
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._executed_requests = 0

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get the entry for a key if it exists and is still fresh.

        Args:
            key: Request fingerprint

        Returns:
            The stored CacheEntry, or None on a miss (absent or expired)
        """
        if not self.config.enabled:
            return None

        with self._lock:
            entry = self._cache.get(key)
            if entry is not None and self._is_expired(entry):
                del self._cache[key]
                self.logger.debug(f"Cache entry expired for key: {key[:8]}...")
                entry = None

            if entry is None:
                self._misses += 1
                self.logger.debug(f"Cache miss for key: {key[:8]}...")
                return None

            self._hits += 1

        self.logger.debug(f"Cache hit for key: {key[:8]}...")
        return entry

    def put(self, key: str, response: CachedResponse) -> Optional[CacheEntry]:
        """Store a response under a key, superseding any previous entry.

        Args:
            key: Request fingerprint
            response: Response to store

        Returns:
            The newly created CacheEntry, or None if caching is disabled
        """
        if not self.config.enabled:
            return None

        with self._lock:
            if key not in self._cache and len(self._cache) >= self.config.max_size:
                self._evict()
            entry = CacheEntry(key=key, response=response, created_at=self._clock())
            self._cache[key] = entry
            size = len(self._cache)

        self.logger.debug(f"Cached response for key: {key[:8]}... (cache size: {size})")
        return entry

    def record_executed_request(self) -> int:
        """Count a request that was sent to the upstream service."""
        with self._lock:
            self._executed_requests += 1
            return self._executed_requests

    def size(self) -> int:
        """Number of stored entries, expired ones included until looked up."""
        with self._lock:
            return len(self._cache)

    def __len__(self) -> int:
        return self.size()

    @property
    def hit_count(self) -> int:
        return self._hits

    @property
    def miss_count(self) -> int:
        return self._misses

    @property
    def number_of_executed_requests(self) -> int:
        return self._executed_requests

    def is_expired(self, entry: CacheEntry) -> bool:
        """Check whether an entry is outside the freshness window."""
        return self._is_expired(entry)

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.created_at >= self.config.ttl_seconds

    def _evict(self) -> None:
        """Make room for one entry. Caller must hold the lock.

        Expired entries go first; if none expired, the oldest entry is dropped.
        """
        expired = [key for key, entry in self._cache.items() if self._is_expired(entry)]
        for key in expired:
            del self._cache[key]
        if expired:
            self.logger.debug(f"Purged {len(expired)} expired cache entries")
            return

        oldest_key = min(self._cache, key=lambda k: self._cache[k].created_at)
        del self._cache[oldest_key]
        self.logger.debug(f"Evicted oldest cache entry: {oldest_key[:8]}...")

    def clear(self) -> None:
        """Clear all cached entries. Counters are kept."""
        with self._lock:
            self._cache.clear()
        self.logger.debug("Cache cleared")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary containing cache statistics
        """
        with self._lock:
            lookups = self._hits + self._misses
            return {
                'enabled': self.config.enabled,
                'size': len(self._cache),
                'max_size': self.config.max_size,
                'ttl_seconds': self.config.ttl_seconds,
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / lookups if lookups else 0.0,
                'executed_requests': self._executed_requests,
            }
