import json
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from catalog_hub.adapters.interfaces.cache import CacheLevel, CacheStrategy
from catalog_hub.core.exceptions import CacheError
from catalog_hub.core.logging import get_logger

logger = get_logger(__name__)


class RedisCache(CacheStrategy):
    """
    Redis-based implementation of the CacheStrategy interface.

    Values are stored as JSON under a namespaced key. Read failures are
    reported as misses and write failures as False, so the callers fall
    back to the live source whenever Redis is unreachable.
    """

    level = CacheLevel.REDIS

    def __init__(
        self,
        host: str,
        port: int = 6379,
        password: Optional[str] = None,
        db: int = 0,
        prefix: str = "catalog_hub",
        default_ttl: int = 60,
        client: Optional[redis.Redis] = None,
        **kwargs
    ):
        """
        Initialize the Redis cache.

        Args:
            host: Redis host
            port: Redis port
            password: Redis password
            db: Redis database number
            prefix: Key prefix for namespacing
            default_ttl: Default TTL in seconds
            client: Pre-built client, mainly for tests
            **kwargs: Additional Redis connection options
        """
        self.prefix = prefix
        self.default_ttl = default_ttl

        if client is not None:
            self.client = client
        else:
            connection_kwargs = {"host": host, "port": port, "db": db, **kwargs}
            if password:
                connection_kwargs["password"] = password
            self.client = redis.Redis(**connection_kwargs)

    def _build_key(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key

    async def ping(self) -> None:
        """
        Verify the connection.

        Raises:
            CacheError: If Redis does not answer
        """
        try:
            await self.client.ping()
        except RedisError as e:
            logger.error(f"Redis connection error: {str(e)}")
            raise CacheError(f"Failed to connect to Redis: {str(e)}")

    async def get(self, key: str) -> Optional[Any]:
        full_key = self._build_key(key)
        try:
            raw = await self.client.get(full_key)
        except RedisError as e:
            logger.warning(f"Redis get failed for key {full_key}: {str(e)}")
            return None

        if raw is None:
            logger.debug(f"Cache miss for key: {full_key}")
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding undecodable cache entry {full_key}: {str(e)}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        full_key = self._build_key(key)
        effective_ttl = ttl if ttl is not None else self.default_ttl

        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            logger.error(f"Value for key {full_key} is not serializable: {str(e)}")
            return False

        try:
            if effective_ttl > 0:
                await self.client.set(full_key, payload, ex=effective_ttl)
            else:
                await self.client.set(full_key, payload)
        except RedisError as e:
            logger.warning(f"Redis set failed for key {full_key}: {str(e)}")
            return False

        logger.debug(f"Set cache key {full_key} with TTL {effective_ttl}s")
        return True

    async def delete(self, key: str) -> bool:
        full_key = self._build_key(key)
        try:
            return bool(await self.client.delete(full_key))
        except RedisError as e:
            logger.warning(f"Redis delete failed for key {full_key}: {str(e)}")
            return False

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.client.exists(self._build_key(key)))
        except RedisError as e:
            logger.warning(f"Redis exists failed: {str(e)}")
            return False

    async def get_stats(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = {"level": self.level.value, "prefix": self.prefix, "default_ttl": self.default_ttl}
        try:
            info = await self.client.info(section="stats")
            stats["hits"] = info.get("keyspace_hits")
            stats["misses"] = info.get("keyspace_misses")
            stats["status"] = "healthy"
        except RedisError as e:
            stats["status"] = "unhealthy"
            stats["error"] = str(e)
        return stats

    async def close(self) -> None:
        await self.client.aclose()
