import asyncio
from abc import ABC, abstractmethod
from typing import Callable, List, Tuple

import httpx
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from catalog_hub.adapters.interfaces.connector import APIConnector, RequestConfig
from catalog_hub.core.exceptions import (
    IntegrationException,
    PersistenceError,
    ProductNotFoundError,
    SnapshotUnavailableError,
)
from catalog_hub.core.logging import get_logger
from catalog_hub.domain.models.product import Product
from catalog_hub.domain.models.reconciliation import ReconciliationReport
from catalog_hub.domain.schemas.product import ProductSchema
from catalog_hub.infrastructure.repositories.product_repository import ProductRepository
from catalog_hub.services.aggregation_service import CatalogAggregator

logger = get_logger(__name__)


class SnapshotSource(ABC):
    """Where a reconciliation run reads the unified catalog snapshot from."""

    @abstractmethod
    async def fetch_snapshot(self) -> List[Product]:
        """
        Raises:
            SnapshotUnavailableError: If no snapshot can be obtained
        """
        pass


class AggregatorSnapshotSource(SnapshotSource):
    """Snapshot taken live from the in-process aggregator."""

    def __init__(self, aggregator: CatalogAggregator):
        self.aggregator = aggregator

    async def fetch_snapshot(self) -> List[Product]:
        try:
            return await self.aggregator.fetch_live()
        except Exception as e:
            logger.error(f"Aggregation failed during reconciliation: {str(e)}")
            raise SnapshotUnavailableError(context={"error": str(e)})


class RemoteSnapshotSource(SnapshotSource):
    """Snapshot read from another hub's aggregated products endpoint."""

    SNAPSHOT_PATH = "/api/v1/adapters/products"

    def __init__(self, base_url: str, client: httpx.AsyncClient, config: RequestConfig = None):
        self.url = APIConnector.build_url(base_url, self.SNAPSHOT_PATH)
        self.connector = APIConnector(client, config)

    async def fetch_snapshot(self) -> List[Product]:
        try:
            payload = await self.connector.get_json(self.url)
        except IntegrationException as e:
            logger.error(f"Snapshot source {self.url} unreachable: {e.detail}")
            raise SnapshotUnavailableError(context={"url": self.url, "error": e.detail})

        items = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise SnapshotUnavailableError(
                detail="Snapshot payload is not a product list",
                context={"url": self.url},
            )

        products: List[Product] = []
        for item in items:
            try:
                products.append(ProductSchema.model_validate(item).to_domain())
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid snapshot item from {self.url} "
                    f"({e.error_count()} validation errors)"
                )
        return products


class CatalogReconciler:
    """
    Mirrors the partner catalogs into the canonical store.

    Products are matched on (origin_id, provider): matches are overwritten
    with the partner copy, unknown products are inserted. Each product is
    written in its own transaction, so one bad record does not stop a run.
    """

    def __init__(self, source: SnapshotSource, repository: ProductRepository):
        self.source = source
        self.repository = repository

    async def reconcile(self) -> ReconciliationReport:
        """
        Run one reconciliation pass.

        Returns:
            Counts of inserted, updated and failed products plus the
            stored state of every product written

        Raises:
            SnapshotUnavailableError: If the snapshot cannot be obtained;
                                      nothing is written in that case
        """
        snapshot = await self.source.fetch_snapshot()
        logger.info(f"Reconciling {len(snapshot)} products")

        report = ReconciliationReport()
        for incoming in snapshot:
            if incoming.is_internal or incoming.ownership_violation():
                logger.warning(
                    f"Skipping snapshot product {incoming.name!r} without partner ownership "
                    f"(origin id {incoming.origin_id}, provider '{incoming.provider}')"
                )
                report.failed += 1
                continue

            try:
                stored, inserted = await run_in_threadpool(self._upsert, incoming)
            except (PersistenceError, ProductNotFoundError) as e:
                logger.error(
                    f"Failed to reconcile product {incoming.origin_id} from {incoming.provider}: {e.detail}"
                )
                report.failed += 1
                continue

            report.products.append(stored)
            if inserted:
                report.inserted += 1
            else:
                report.updated += 1

        logger.info(
            f"Reconciliation finished: {report.inserted} inserted, "
            f"{report.updated} updated, {report.failed} failed"
        )
        return report

    def _upsert(self, incoming: Product) -> Tuple[Product, bool]:
        existing = self.repository.find_by_origin(incoming.origin_id, incoming.provider)
        if existing is None:
            return self.repository.add(incoming), True
        return self.repository.update_from(existing, incoming), False


async def reconcile_periodically(
    source: SnapshotSource,
    session_factory: Callable[[], Session],
    interval: float,
) -> None:
    """
    Run reconciliation every `interval` seconds until cancelled.

    Each run gets its own session. Failures are logged and the loop
    carries on with the next run.
    """
    logger.info(f"Periodic reconciliation every {interval}s")
    while True:
        await asyncio.sleep(interval)
        session = session_factory()
        try:
            await CatalogReconciler(source, ProductRepository(session)).reconcile()
        except SnapshotUnavailableError as e:
            logger.warning(f"Periodic reconciliation skipped: {e.detail}")
        except Exception as e:
            logger.exception(f"Periodic reconciliation failed: {str(e)}")
        finally:
            await run_in_threadpool(session.close)
