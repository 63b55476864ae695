from dataclasses import dataclass, field
from typing import List

from catalog_hub.domain.models.product import Product


@dataclass
class ReconciliationReport:
    """Summary of one reconciliation run."""

    inserted: int = 0
    updated: int = 0
    failed: int = 0
    products: List[Product] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.inserted + self.updated + self.failed
