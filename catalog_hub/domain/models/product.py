from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

# Reserved ownership markers for locally created products
INTERNAL_ORIGIN_ID = -1
INTERNAL_PROVIDER = ""


@dataclass
class ProductAttribute:
    """Key/value attribute attached to a product."""

    key: str
    value: str
    provider: str = INTERNAL_PROVIDER
    id: Optional[int] = None


@dataclass
class ProductContent:
    """Media descriptor attached to a product."""

    type: str
    url: str
    description: Optional[str] = None
    provider: str = INTERNAL_PROVIDER
    id: Optional[int] = None


@dataclass
class ProductCategory:
    """Product category."""

    id: int
    name: str
    description: Optional[str] = None


@dataclass
class Product:
    """Domain model for canonical product data."""

    name: str
    id: Optional[int] = None
    origin_id: int = INTERNAL_ORIGIN_ID
    provider: str = INTERNAL_PROVIDER
    description: str = ""
    available_quantity: int = 0
    price: Decimal = Decimal("0")
    currency: str = ""
    owner: Optional[str] = None
    created_by: Optional[int] = None
    category_id: Optional[int] = None
    attributes: List[ProductAttribute] = field(default_factory=list)
    contents: List[ProductContent] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        # Collections are never None so callers can iterate unconditionally
        if self.attributes is None:
            self.attributes = []
        if self.contents is None:
            self.contents = []

    @property
    def is_internal(self) -> bool:
        """True when the product is owned and stocked by the local store."""
        return self.provider == INTERNAL_PROVIDER and self.origin_id == INTERNAL_ORIGIN_ID

    def ownership_violation(self) -> Optional[str]:
        """
        Describe why an external product's ownership tags are inconsistent.

        Returns:
            A message for a product whose provider tag is blank or whose
            origin id is the internal marker, None for a consistent one.
        """
        if self.is_internal:
            return None
        if not self.provider or not self.provider.strip():
            return f"Product {self.id} has origin id {self.origin_id} but no provider tag"
        if self.origin_id == INTERNAL_ORIGIN_ID:
            return f"Product {self.id} is tagged with provider '{self.provider}' but has no origin id"
        return None

    def can_cover(self, quantity: int) -> bool:
        """Checks if local stock covers the requested quantity."""
        return self.available_quantity >= quantity
