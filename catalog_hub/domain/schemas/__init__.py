"""Wire schemas (request and response bodies) for the Catalog Hub API."""

from catalog_hub.domain.schemas.product import (
    AttributeSchema,
    CategorySchema,
    ContentSchema,
    ProductListResponse,
    ProductSchema,
)
from catalog_hub.domain.schemas.checkout import (
    CheckoutItem,
    DispatchResponse,
    LineOutcomeSchema,
    ReconciliationResponse,
)

__all__ = [
    "AttributeSchema",
    "CategorySchema",
    "ContentSchema",
    "ProductListResponse",
    "ProductSchema",
    "CheckoutItem",
    "DispatchResponse",
    "LineOutcomeSchema",
    "ReconciliationResponse",
]
