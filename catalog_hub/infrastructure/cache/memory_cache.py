import copy
import threading
import time
from typing import Any, Dict, Optional

from catalog_hub.adapters.interfaces.cache import CacheLevel, CacheStrategy
from catalog_hub.core.logging import get_logger

logger = get_logger(__name__)


class CacheItem:
    """Class representing a cached item with expiration."""

    def __init__(self, value: Any, expires_at: Optional[float] = None):
        self.value = value
        self.expires_at = expires_at

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


class MemoryCache(CacheStrategy):
    """
    In-process implementation of the CacheStrategy interface.

    Expired items are evicted lazily on access and whenever a new key is
    written. Values are deep-copied in and out so callers cannot mutate
    the cached snapshot.
    """

    level = CacheLevel.MEMORY

    def __init__(self, default_ttl: int = 60):
        """
        Initialize the in-memory cache.

        Args:
            default_ttl: Default TTL in seconds, 0 for no expiry
        """
        self.default_ttl = default_ttl
        self._cache: Dict[str, CacheItem] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

        logger.info("In-memory cache initialized")

    def _evict_expired(self) -> None:
        expired = [key for key, item in self._cache.items() if item.is_expired()]
        for key in expired:
            del self._cache[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache items")

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._cache.get(key)

            if item is None:
                self._misses += 1
                logger.debug(f"Cache miss for key: {key}")
                return None

            if item.is_expired():
                del self._cache[key]
                self._misses += 1
                logger.debug(f"Cache miss (expired) for key: {key}")
                return None

            self._hits += 1
            logger.debug(f"Cache hit for key: {key}")
            return copy.deepcopy(item.value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        effective_ttl = ttl if ttl is not None else self.default_ttl

        expires_at = None
        if effective_ttl > 0:
            expires_at = time.time() + effective_ttl

        item = CacheItem(value=copy.deepcopy(value), expires_at=expires_at)

        with self._lock:
            self._evict_expired()
            self._cache[key] = item

        logger.debug(f"Set cache key {key} with TTL {effective_ttl}s")
        return True

    async def delete(self, key: str) -> bool:
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                logger.debug(f"Deleted cache key: {key}")
                return True
            return False

    async def exists(self, key: str) -> bool:
        with self._lock:
            item = self._cache.get(key)
            if item is None:
                return False
            if item.is_expired():
                del self._cache[key]
                return False
            return True

    async def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            self._evict_expired()
            return {
                "level": self.level.value,
                "keys": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "default_ttl": self.default_ttl,
            }
