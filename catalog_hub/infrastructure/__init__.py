"""Infrastructure layer for the Catalog Hub."""

# Import main components for easier access
from catalog_hub.infrastructure.cache import MemoryCache, RedisCache
from catalog_hub.infrastructure.repositories import ProductRepository
