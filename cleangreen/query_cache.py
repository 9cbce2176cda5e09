"""
Query cache for backend reads
Avoids redundant fetches and lets mutations invalidate stale views
"""
import logging
import time
from threading import Lock
from typing import Any, Awaitable, Callable, Optional

from .config import QUERY_CACHE_MAX_ENTRIES, QUERY_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

QueryKey = tuple[str, ...]

CACHE_CLEANUP_INTERVAL = 60  # Sweep expired entries at most once a minute


def make_key(*parts: Any) -> QueryKey:
    """Build a query key, e.g. make_key("/api/available-slots", "2025-06-10")"""
    return tuple("" if p is None else str(p) for p in parts)


def _matches(key: QueryKey, prefix: QueryKey) -> bool:
    if not prefix:
        return True
    path, rest = prefix[0], prefix[1:]
    if key[0] != path:
        if rest or not key[0].startswith(path.rstrip("/") + "/"):
            return False
    return key[1 : 1 + len(rest)] == rest


class QueryCache:
    """In-memory cache keyed by logical query identity with TTL and prefix invalidation"""

    def __init__(self, ttl: int = QUERY_CACHE_TTL_SECONDS, max_entries: int = QUERY_CACHE_MAX_ENTRIES):
        self.ttl = ttl
        self.max_entries = max_entries
        self.cleanup_interval = min(ttl, CACHE_CLEANUP_INTERVAL)
        self._entries: dict[QueryKey, dict] = {}
        self._lock = Lock()
        self._last_cleanup = time.monotonic()

    def get(self, key: QueryKey) -> Optional[Any]:
        """Get value from cache"""
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"❌ Cache MISS: {key}")
                return None
            if now >= entry["expires_at"]:
                del self._entries[key]
                logger.debug(f"⌛ Cache STALE: {key}")
                return None
        logger.debug(f"✅ Cache HIT: {key}")
        return entry["value"]

    def set(self, key: QueryKey, value: Any, ttl: Optional[int] = None) -> None:
        """Set value in cache with TTL (default from config)"""
        ttl = self.ttl if ttl is None else ttl
        now = time.monotonic()
        with self._lock:
            if now - self._last_cleanup >= self.cleanup_interval or len(self._entries) >= self.max_entries:
                self._sweep(now)
            self._entries.pop(key, None)
            while self._entries and len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug(f"🧹 Cache EVICT: {oldest}")
            self._entries[key] = {"value": value, "expires_at": now + ttl}
        logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")

    def _sweep(self, now: float) -> None:
        """Drop expired entries; caller holds the lock"""
        expired = [k for k, v in self._entries.items() if now >= v["expires_at"]]
        for k in expired:
            del self._entries[k]
        self._last_cleanup = now
        if expired:
            logger.debug(f"🧹 Cleaned up {len(expired)} expired cache entries")

    def invalidate(self, *prefix: Any) -> int:
        """
        Drop every entry whose key starts with prefix, e.g. invalidate("/api/bookings").

        A bare path also covers the paths below it, so "/api/bookings" drops
        "/api/bookings/manage/<token>" too.
        """
        prefix_key = make_key(*prefix)
        with self._lock:
            stale = [k for k in self._entries if _matches(k, prefix_key)]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug(f"✅ Cache INVALIDATE: {prefix_key} ({len(stale)} keys)")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def fetch(
        self,
        key: QueryKey,
        loader: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Return the cached value for key, or await loader and cache its result.

        Failed loads are not cached; the exception propagates to the caller.
        """
        cached_value = self.get(key)
        if cached_value is not None:
            return cached_value

        result = await loader()
        if result is not None:
            self.set(key, result, ttl)
        return result

    def stats(self) -> dict:
        with self._lock:
            return {"entries": len(self._entries), "ttl": self.ttl, "maxEntries": self.max_entries}
