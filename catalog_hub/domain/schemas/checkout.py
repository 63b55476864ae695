from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from catalog_hub.domain.models.checkout import (
    BatchOutcome,
    CheckoutRequest,
    LineOutcome,
)
from catalog_hub.domain.models.reconciliation import ReconciliationReport
from catalog_hub.domain.schemas.product import CamelModel, ProductSchema


class CheckoutItem(CamelModel):
    """Checkout or sale line item request body."""
    product_id: int
    quantity: int = Field(..., gt=0)
    item_total_price: Optional[Decimal] = None

    def to_domain(self) -> CheckoutRequest:
        return CheckoutRequest(
            product_id=self.product_id,
            quantity=self.quantity,
            item_total_price=self.item_total_price,
        )


class LineOutcomeSchema(BaseModel):
    """Outcome of one dispatched line item."""
    product_id: int
    status: str
    reason: Optional[str] = None
    detail: Optional[str] = None
    provider: Optional[str] = None

    @classmethod
    def from_domain(cls, outcome: LineOutcome) -> "LineOutcomeSchema":
        return cls(**outcome.to_dict())


class DispatchResponse(BaseModel):
    """Overall checkout/sale result plus per-line outcomes."""
    success: bool
    items: List[LineOutcomeSchema]

    @classmethod
    def from_domain(cls, outcome: BatchOutcome) -> "DispatchResponse":
        return cls(
            success=outcome.success,
            items=[LineOutcomeSchema.from_domain(item) for item in outcome.items],
        )


class ReconciliationResponse(BaseModel):
    """Summary of a reconciliation run."""
    inserted: int
    updated: int
    failed: int
    data: List[ProductSchema]

    @classmethod
    def from_domain(cls, report: ReconciliationReport) -> "ReconciliationResponse":
        return cls(
            inserted=report.inserted,
            updated=report.updated,
            failed=report.failed,
            data=[ProductSchema.from_domain(p) for p in report.products],
        )
