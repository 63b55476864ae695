from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from catalog_hub.domain.models.product import (
    INTERNAL_ORIGIN_ID,
    INTERNAL_PROVIDER,
    Product,
    ProductAttribute,
    ProductCategory,
    ProductContent,
)


class CamelModel(BaseModel):
    """Base schema exchanging camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttributeSchema(CamelModel):
    """Product attribute as exposed on the wire."""
    attribute_id: Optional[int] = None
    key: str
    value: str
    provider: str = INTERNAL_PROVIDER

    @classmethod
    def from_domain(cls, attribute: ProductAttribute) -> "AttributeSchema":
        return cls(
            attribute_id=attribute.id,
            key=attribute.key,
            value=attribute.value,
            provider=attribute.provider,
        )


class AttributeInput(CamelModel):
    """Locally managed attribute sent by a client."""
    key: str = Field(..., min_length=1, max_length=200)
    value: str

    def to_domain(self) -> ProductAttribute:
        return ProductAttribute(key=self.key, value=self.value)


class ContentSchema(CamelModel):
    """Product media descriptor as exposed on the wire."""
    content_id: Optional[int] = None
    type: str
    url: str
    description: Optional[str] = None
    provider: str = INTERNAL_PROVIDER


class CategorySchema(CamelModel):
    """Product category as exposed on the wire."""
    id: int
    name: str
    description: Optional[str] = None

    @classmethod
    def from_domain(cls, category: ProductCategory) -> "CategorySchema":
        return cls(id=category.id, name=category.name, description=category.description)


class ProductSchema(CamelModel):
    """Canonical product as exposed on the wire."""
    id: Optional[int] = None
    origin_id: int = INTERNAL_ORIGIN_ID
    provider: str = INTERNAL_PROVIDER
    name: str
    description: Optional[str] = ""
    available_quantity: int = Field(0, ge=0)
    price: Decimal = Decimal("0")
    currency: str = ""
    owner: Optional[str] = None
    created_by: Optional[int] = None
    category_id: Optional[int] = None
    attributes: Optional[List[AttributeSchema]] = None
    contents: Optional[List[ContentSchema]] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, product: Product) -> "ProductSchema":
        """Maps a domain product to its wire representation."""
        return cls(
            id=product.id,
            origin_id=product.origin_id,
            provider=product.provider,
            name=product.name,
            description=product.description,
            available_quantity=product.available_quantity,
            price=product.price,
            currency=product.currency,
            owner=product.owner,
            created_by=product.created_by,
            category_id=product.category_id,
            attributes=[AttributeSchema.from_domain(a) for a in product.attributes],
            contents=[
                ContentSchema(
                    content_id=c.id,
                    type=c.type,
                    url=c.url,
                    description=c.description,
                    provider=c.provider,
                )
                for c in product.contents
            ],
            updated_at=product.updated_at,
        )

    def to_domain(self) -> Product:
        """Maps the wire representation to a domain product."""
        return Product(
            id=self.id,
            origin_id=self.origin_id,
            provider=self.provider or INTERNAL_PROVIDER,
            name=self.name,
            description=self.description or "",
            available_quantity=self.available_quantity,
            price=self.price,
            currency=self.currency,
            owner=self.owner,
            created_by=self.created_by,
            category_id=self.category_id,
            attributes=[
                ProductAttribute(key=a.key, value=a.value, provider=a.provider)
                for a in self.attributes or []
            ],
            contents=[
                ProductContent(type=c.type, url=c.url, description=c.description, provider=c.provider)
                for c in self.contents or []
            ],
            updated_at=self.updated_at,
        )


class ProductListResponse(BaseModel):
    """List of products with a total count."""
    data: List[ProductSchema]
    total: int
