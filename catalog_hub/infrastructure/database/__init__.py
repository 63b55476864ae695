"""Relational storage for the canonical product catalog."""

from catalog_hub.infrastructure.database.models import (
    Base,
    ProductAttributeEntity,
    ProductCategoryEntity,
    ProductContentEntity,
    ProductEntity,
)

__all__ = [
    "Base",
    "ProductAttributeEntity",
    "ProductCategoryEntity",
    "ProductContentEntity",
    "ProductEntity",
]
