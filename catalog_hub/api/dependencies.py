from fastapi import Depends, Request
from sqlalchemy.orm import Session

from catalog_hub.adapters.factory import AdaptorFactory
from catalog_hub.adapters.interfaces.cache import CacheStrategy
from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.core.logging import get_logger
from catalog_hub.infrastructure.database.session import get_db
from catalog_hub.infrastructure.repositories.product_repository import ProductRepository
from catalog_hub.services.aggregation_service import CatalogAggregator
from catalog_hub.services.dispatch_service import CheckoutDispatcher
from catalog_hub.services.reconciliation_service import CatalogReconciler, SnapshotSource

# Initialize logger
logger = get_logger(__name__)


def get_adaptor_factory(request: Request) -> AdaptorFactory:
    """Adaptor factory built at startup."""
    return request.app.state.adaptor_factory


def get_registry(request: Request) -> AdaptorRegistry:
    """Adaptor registry built at startup."""
    return request.app.state.registry


def get_cache_service(request: Request) -> CacheStrategy:
    """Snapshot cache backend built at startup."""
    return request.app.state.cache


def get_aggregator(request: Request) -> CatalogAggregator:
    return request.app.state.aggregator


def get_snapshot_source(request: Request) -> SnapshotSource:
    return request.app.state.snapshot_source


def get_repository(db: Session = Depends(get_db)) -> ProductRepository:
    """
    Product repository bound to the request's database session.

    Args:
        db: Session from the get_db dependency

    Returns:
        ProductRepository: Repository for this request
    """
    return ProductRepository(db)


def get_dispatcher(
    repository: ProductRepository = Depends(get_repository),
    registry: AdaptorRegistry = Depends(get_registry),
) -> CheckoutDispatcher:
    return CheckoutDispatcher(repository, registry)


def get_reconciler(
    repository: ProductRepository = Depends(get_repository),
    source: SnapshotSource = Depends(get_snapshot_source),
) -> CatalogReconciler:
    return CatalogReconciler(source, repository)
