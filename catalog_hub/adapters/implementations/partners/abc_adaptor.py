"""
Adaptor for the ABC marketplace catalog.

ABC wraps its items in an envelope and uses its own vocabulary: SKU ids,
titles, a structured unit price, free-form specs and media entries.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from catalog_hub.adapters.implementations.partners.base import PartnerAdaptor
from catalog_hub.adapters.interfaces.normalizer import DataNormalizer
from catalog_hub.domain.models.checkout import CheckoutRequest
from catalog_hub.domain.models.product import Product, ProductAttribute, ProductContent


class AbcPrice(BaseModel):
    amount: Decimal
    currency: str


class AbcMedia(BaseModel):
    kind: str
    href: str
    caption: Optional[str] = None


class AbcItem(BaseModel):
    """Catalog item as published by ABC."""
    sku_id: int
    title: str
    summary: Optional[str] = None
    stock: int = Field(0, ge=0)
    unit_price: AbcPrice
    vendor: Optional[str] = None
    category: Optional[int] = None
    specs: Optional[Dict[str, Any]] = None
    media: Optional[List[AbcMedia]] = None


class AbcCatalog(BaseModel):
    items: Optional[List[AbcItem]] = None


class AbcNormalizer(DataNormalizer[AbcItem]):
    """Translates ABC items to and from canonical products."""

    def parse_catalog(self, payload: Any) -> List[AbcItem]:
        if payload is None:
            return []
        return AbcCatalog.model_validate(payload).items or []

    def normalize_product(self, record: AbcItem) -> Product:
        return Product(
            origin_id=record.sku_id,
            provider=self.provider,
            name=record.title,
            description=record.summary or "",
            available_quantity=record.stock,
            price=record.unit_price.amount,
            currency=record.unit_price.currency,
            owner=record.vendor,
            category_id=record.category,
            attributes=[
                ProductAttribute(key=key, value=str(value), provider=self.provider)
                for key, value in (record.specs or {}).items()
            ],
            contents=[
                ProductContent(
                    type=m.kind,
                    url=m.href,
                    description=m.caption,
                    provider=self.provider,
                )
                for m in record.media or []
            ],
        )

    def to_partner_order(self, request: CheckoutRequest, product: Product) -> Dict[str, Any]:
        total = request.item_total_price
        if total is None:
            total = product.price * request.quantity
        return {
            "sku_id": product.origin_id,
            "units": request.quantity,
            "total": {"amount": str(total), "currency": product.currency},
        }


class AbcAdaptor(PartnerAdaptor):
    """Adaptor for the ABC marketplace."""

    SOURCE_NAME = "abc"
    CATALOG_PATH = "/catalog/items"
    CHECKOUT_PATH = "/orders/reserve"
    SELL_PATH = "/orders"
    NORMALIZER_CLASS = AbcNormalizer
