"""Domain services: catalog aggregation, checkout dispatch and reconciliation."""

from catalog_hub.services.aggregation_service import SNAPSHOT_CACHE_KEY, CatalogAggregator
from catalog_hub.services.dispatch_service import CheckoutDispatcher
from catalog_hub.services.reconciliation_service import (
    AggregatorSnapshotSource,
    CatalogReconciler,
    RemoteSnapshotSource,
    SnapshotSource,
    reconcile_periodically,
)

__all__ = [
    "SNAPSHOT_CACHE_KEY",
    "CatalogAggregator",
    "CheckoutDispatcher",
    "AggregatorSnapshotSource",
    "CatalogReconciler",
    "RemoteSnapshotSource",
    "SnapshotSource",
    "reconcile_periodically",
]
