"""
Adaptor for the CDE partner catalog.

CDE publishes records that already resemble the canonical product: a JSON
list of products with camelCase fields and nested attribute/content lists.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from catalog_hub.adapters.implementations.partners.base import PartnerAdaptor
from catalog_hub.adapters.interfaces.normalizer import DataNormalizer
from catalog_hub.domain.models.checkout import CheckoutRequest
from catalog_hub.domain.models.product import Product, ProductAttribute, ProductContent


class CdeAttribute(BaseModel):
    key: str
    value: str


class CdeContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_id: Optional[int] = Field(None, alias="contentId")
    type: str
    url: str
    description: Optional[str] = None


class CdeProduct(BaseModel):
    """Product record as published by CDE."""

    model_config = ConfigDict(populate_by_name=True)

    origin_id: int = Field(..., alias="originId")
    name: str
    description: Optional[str] = None
    available_quantity: int = Field(0, ge=0, alias="availableQuantity")
    price: Decimal = Decimal("0")
    currency: str = ""
    owner: Optional[Union[int, str]] = None
    product_category_id: Optional[int] = Field(None, alias="productCategoryId")
    attributes: Optional[List[CdeAttribute]] = None
    contents: Optional[List[CdeContent]] = None


_catalog_adapter = TypeAdapter(List[CdeProduct])


class CdeNormalizer(DataNormalizer[CdeProduct]):
    """Translates CDE records to and from canonical products."""

    def parse_catalog(self, payload: Any) -> List[CdeProduct]:
        if payload is None:
            return []
        return _catalog_adapter.validate_python(payload)

    def normalize_product(self, record: CdeProduct) -> Product:
        return Product(
            origin_id=record.origin_id,
            provider=self.provider,
            name=record.name,
            description=record.description or "",
            available_quantity=record.available_quantity,
            price=record.price,
            currency=record.currency,
            owner=str(record.owner) if record.owner is not None else None,
            category_id=record.product_category_id,
            attributes=[
                ProductAttribute(key=a.key, value=a.value, provider=self.provider)
                for a in record.attributes or []
            ],
            contents=[
                ProductContent(
                    type=c.type,
                    url=c.url,
                    description=c.description,
                    provider=self.provider,
                )
                for c in record.contents or []
            ],
        )

    def to_partner_order(self, request: CheckoutRequest, product: Product) -> Dict[str, Any]:
        return {
            "productId": product.origin_id,
            "quantity": request.quantity,
            "itemTotalPrice": str(request.item_total_price) if request.item_total_price is not None else None,
        }


class CdeAdaptor(PartnerAdaptor):
    """Adaptor for the CDE partner service."""

    SOURCE_NAME = "cde"
    CATALOG_PATH = "/api/v1/product"
    CHECKOUT_PATH = "/api/v1/order/checkout"
    SELL_PATH = "/api/v1/order"
    NORMALIZER_CLASS = CdeNormalizer
