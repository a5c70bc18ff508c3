"""
Query Cache
In-memory cache of list payloads keyed by (entity, scope), invalidated per entity
"""
from typing import Any, Dict, Hashable, Optional, Tuple
import threading
import time
import logging

from logistik.core.config import settings

logger = logging.getLogger(__name__)

# Entity key shared by every soft-deletable table
RECYCLE_BIN = "recycle-bin"

CacheKey = Tuple[str, Hashable]


class QueryCache:
    """
    Thread-safe tagged-key cache.

    Keys are (entity, scope) tuples; ``invalidate(entity)`` drops every scope
    cached for that entity. Values are JSON-ready payloads, never ORM objects.
    """

    def __init__(self, ttl_seconds: int = 30):
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[CacheKey, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, entity: str, scope: Hashable = "all") -> Optional[Any]:
        key = (entity, scope)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at < time.monotonic():
                del self._entries[key]
                return None
        logger.debug(f"Cache hit for {entity}:{scope}")
        return value

    def set(self, entity: str, value: Any, scope: Hashable = "all", ttl: Optional[int] = None):
        seconds = ttl if ttl is not None else self.ttl_seconds
        if seconds <= 0:
            return
        with self._lock:
            self._entries[(entity, scope)] = (time.monotonic() + seconds, value)

    def invalidate(self, *entities: str) -> int:
        """Drop all cached scopes for the given entities. Returns the number of keys removed."""
        targets = set(entities)
        with self._lock:
            stale = [key for key in self._entries if key[0] in targets]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cache keys for {', '.join(sorted(targets))}")
        return len(stale)

    def clear(self):
        with self._lock:
            self._entries.clear()


# Singleton instance, local to this process. With several workers a change made
# in one is seen by the others only once their copy expires, so keep
# CACHE_TTL_SECONDS short or set it to 0 (no caching). Use Redis to share it.
query_cache = QueryCache(ttl_seconds=settings.CACHE_TTL_SECONDS)
