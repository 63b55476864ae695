from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from enum import Enum


class CacheLevel(str, Enum):
    """Enum defining cache storage levels."""
    MEMORY = "memory"
    REDIS = "redis"


class CacheStrategy(ABC):
    """
    Abstract base interface for caching strategies.

    Values must be JSON-compatible so every backend can store them.
    """

    level: CacheLevel

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Retrieves a cached item by key.

        Args:
            key: The key of the item to retrieve

        Returns:
            Optional[Any]: The cached value if found, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Stores an item in the cache.

        Args:
            key: The key to store the value under
            value: The value to store
            ttl: Optional time-to-live in seconds

        Returns:
            bool: True if successfully cached, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Removes an item from the cache.

        Args:
            key: The key of the item to remove

        Returns:
            bool: True if the key was present and removed
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Checks if a key exists in the cache.
        """
        pass

    @abstractmethod
    async def get_stats(self) -> Dict[str, Any]:
        """
        Returns statistics about the cache.
        """
        pass

    async def close(self) -> None:
        """Releases backend resources."""
        return None
