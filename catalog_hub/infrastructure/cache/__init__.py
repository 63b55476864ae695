"""Caching implementations for the catalog hub."""

from catalog_hub.core.config import Settings
from catalog_hub.adapters.interfaces.cache import CacheStrategy
from catalog_hub.infrastructure.cache.memory_cache import MemoryCache
from catalog_hub.infrastructure.cache.redis_cache import RedisCache


def create_cache(settings: Settings) -> CacheStrategy:
    """Redis when a host is configured, in-process memory otherwise."""
    if settings.REDIS_HOST:
        return RedisCache(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            default_ttl=settings.CACHE_TTL,
        )
    return MemoryCache(default_ttl=settings.CACHE_TTL)


__all__ = ["RedisCache", "MemoryCache", "create_cache"]
