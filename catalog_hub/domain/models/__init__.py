"""
Domain models package for the Catalog Hub.

This package contains the core domain entities: the canonical product with
its attributes and contents, checkout line items and their outcomes, and
reconciliation reports. Domain models are persistence-agnostic.
"""

from catalog_hub.domain.models.product import (
    INTERNAL_ORIGIN_ID,
    INTERNAL_PROVIDER,
    Product,
    ProductAttribute,
    ProductCategory,
    ProductContent,
)
from catalog_hub.domain.models.checkout import (
    BatchOutcome,
    CheckoutRequest,
    FailureReason,
    LineOutcome,
    LineStatus,
)
from catalog_hub.domain.models.reconciliation import ReconciliationReport

__all__ = [
    "INTERNAL_ORIGIN_ID",
    "INTERNAL_PROVIDER",
    "Product",
    "ProductAttribute",
    "ProductCategory",
    "ProductContent",
    "BatchOutcome",
    "CheckoutRequest",
    "FailureReason",
    "LineOutcome",
    "LineStatus",
    "ReconciliationReport",
]
