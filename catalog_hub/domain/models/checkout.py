from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class LineStatus(str, Enum):
    """Terminal states of one dispatched line item."""
    SOLD = "sold"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    FAILED = "failed"


class FailureReason(str, Enum):
    """Why a line item was rejected or failed."""
    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
    UPSTREAM = "upstream"
    PERSISTENCE = "persistence"
    INVALID_REQUEST = "invalid_request"


@dataclass
class CheckoutRequest:
    """One line item of a checkout or sale."""

    product_id: int
    quantity: int
    item_total_price: Optional[Decimal] = None


@dataclass
class LineOutcome:
    """Result of dispatching a single line item."""

    product_id: int
    status: LineStatus
    reason: Optional[FailureReason] = None
    detail: Optional[str] = None
    provider: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (LineStatus.SOLD, LineStatus.CONFIRMED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "status": self.status.value,
            "reason": self.reason.value if self.reason else None,
            "detail": self.detail,
            "provider": self.provider,
        }


@dataclass
class BatchOutcome:
    """
    Result of dispatching a batch of line items.

    Lines are independent: a failed line does not undo lines that were
    already sold.
    """

    items: List[LineOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(item.succeeded for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "items": [item.to_dict() for item in self.items],
        }
