"""
In-Process Caching Layer
Time-bound key/value store for quotes, market news and sentiment results
"""

import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Stored value and the monotonic time at which it goes stale"""
    value: Any
    expires_at: float


class CacheStore:
    """
    TTL cache with lazy (read-time) expiry

    Features:
    - Entries expire when the clock reaches expires_at; no background sweeper
    - put() always replaces the previous entry for a key
    - A single lock makes every get/put an atomic read or replace
    - Namespace prefix on all keys
    """

    def __init__(
        self,
        default_ttl: float = 300,
        namespace: str = "envest",
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize cache store

        Args:
            default_ttl: Time-to-live in seconds used when put() gets no ttl
            namespace: Prefix for all keys
            clock: Monotonic time source in seconds
        """
        self.default_ttl = default_ttl
        self.namespace = namespace
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _make_key(self, key: str) -> str:
        """Create namespaced key"""
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        full_key = self._make_key(key)
        with self._lock:
            entry = self._entries.get(full_key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            logger.debug(f"Cache expired: {full_key}")
            return None
        return entry.value

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """
        Store value in cache, overwriting any previous entry

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live in seconds (None uses default)

        Returns:
            True if the value was stored
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return False

        entry = CacheEntry(value=value, expires_at=self._clock() + ttl)
        with self._lock:
            self._entries[self._make_key(key)] = entry
        return True

    def get_stats(self) -> dict:
        """Get cache statistics"""
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        return {
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "entries": len(entries),
            "live_entries": sum(1 for e in entries if now < e.expires_at),
        }


class CacheKeys:
    """Standardized cache key generators, one keyspace per component"""

    @staticmethod
    def quote(provider_symbol: str) -> str:
        """Cache key for a quote, by provider ticker"""
        return f"quote:{provider_symbol.upper()}"

    @staticmethod
    def market_news() -> str:
        """Cache key for the shared general market news"""
        return "news:market"

    @staticmethod
    def sentiment(subject: str, titles: Iterable[str]) -> str:
        """Cache key for a sentiment verdict over one or more headlines"""
        digest = hashlib.md5(
            "\n".join([subject.upper(), *titles]).encode("utf-8")
        ).hexdigest()[:16]
        return f"sentiment:{digest}"


class CacheTTL:
    """Time-to-live presets in seconds"""

    QUOTE = 30  # Finnhub free tier allows 60 calls/min
    MARKET_NEWS = 900  # same for every viewer
    SENTIMENT = 1800
