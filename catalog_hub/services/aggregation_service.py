import asyncio
from typing import Any, Dict, List, Optional

from catalog_hub.adapters.interfaces.cache import CacheStrategy
from catalog_hub.adapters.interfaces.external_api import ExternalAPIAdaptorInterface
from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.core.logging import get_logger, set_provider
from catalog_hub.domain.models.product import Product
from catalog_hub.domain.schemas.product import ProductSchema

logger = get_logger(__name__)

SNAPSHOT_CACHE_KEY = "catalog:snapshot"


class CatalogAggregator:
    """
    Builds the unified catalog snapshot from every registered adaptor.

    Partners are queried concurrently. A partner that fails or times out
    contributes nothing; aggregation itself never fails because of one.
    """

    def __init__(
        self,
        registry: AdaptorRegistry,
        cache: Optional[CacheStrategy] = None,
        timeout: Optional[float] = None,
        cache_ttl: Optional[int] = None,
    ):
        """
        Args:
            registry: Registry holding the configured adaptors
            cache: Optional snapshot cache
            timeout: Upper bound in seconds for one partner read, None for no bound
            cache_ttl: TTL for the cached snapshot, backend default when None
        """
        self.registry = registry
        self.cache = cache
        self.timeout = timeout
        self.cache_ttl = cache_ttl

    async def _fetch_one(self, adaptor: ExternalAPIAdaptorInterface) -> List[Product]:
        # Runs in its own task, so the provider tag stays local to this partner
        set_provider(adaptor.source_name)
        try:
            if self.timeout is None:
                products = await adaptor.fetch_catalog()
            else:
                products = await asyncio.wait_for(adaptor.fetch_catalog(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Catalog fetch from {adaptor.source_name} timed out after {self.timeout}s"
            )
            return []
        except Exception as e:
            logger.warning(
                f"Catalog fetch from {adaptor.source_name} failed: {str(e)}",
                exc_info=True,
            )
            return []

        valid = [p for p in products if p.available_quantity >= 0]
        if len(valid) < len(products):
            logger.warning(
                f"Dropped {len(products) - len(valid)} products with negative stock "
                f"from {adaptor.source_name}"
            )
        return valid

    async def fetch_live(self) -> List[Product]:
        """
        Query every adaptor concurrently and concatenate their catalogs.

        Returns:
            The unified snapshot. Order is not significant.
        """
        adaptors = list(self.registry)
        if not adaptors:
            logger.info("No adaptors registered, snapshot is empty")
            return []

        results = await asyncio.gather(*(self._fetch_one(adaptor) for adaptor in adaptors))

        snapshot: List[Product] = []
        for adaptor, products in zip(adaptors, results):
            logger.debug(f"{adaptor.source_name} contributed {len(products)} products")
            snapshot.extend(products)

        logger.info(f"Aggregated {len(snapshot)} products from {len(adaptors)} adaptors")
        return snapshot

    async def list_all(self, use_cache: bool = False) -> List[Product]:
        """
        Get the unified catalog snapshot.

        Args:
            use_cache: Serve from and populate the snapshot cache

        Returns:
            Products from every reachable partner
        """
        if not use_cache or self.cache is None:
            return await self.fetch_live()

        cached = await self._read_cache()
        if cached is not None:
            return cached

        snapshot = await self.fetch_live()
        await self._write_cache(snapshot)
        return snapshot

    async def invalidate(self) -> None:
        """Drop the cached snapshot."""
        if self.cache is None:
            return
        try:
            await self.cache.delete(SNAPSHOT_CACHE_KEY)
        except Exception as e:
            logger.warning(f"Failed to invalidate snapshot cache: {str(e)}")

    async def _read_cache(self) -> Optional[List[Product]]:
        try:
            payload = await self.cache.get(SNAPSHOT_CACHE_KEY)
            if payload is None:
                return None
            return [ProductSchema.model_validate(item).to_domain() for item in payload]
        except Exception as e:
            logger.warning(f"Snapshot cache read failed, fetching live: {str(e)}")
            return None

    async def _write_cache(self, snapshot: List[Product]) -> None:
        try:
            payload: List[Dict[str, Any]] = [
                ProductSchema.from_domain(product).model_dump(mode="json") for product in snapshot
            ]
            await self.cache.set(SNAPSHOT_CACHE_KEY, payload, self.cache_ttl)
        except Exception as e:
            logger.warning(f"Snapshot cache write failed: {str(e)}")
