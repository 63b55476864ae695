from abc import ABC, abstractmethod
from typing import Any, Dict, List
from enum import Enum
import logging

from catalog_hub.domain.models.checkout import CheckoutRequest
from catalog_hub.domain.models.product import Product

logger = logging.getLogger(__name__)


class CapabilityType(str, Enum):
    """Enum defining the capabilities a partner adaptor can expose."""
    IDENTIFY = "identify"
    LIST = "list"
    CHECKOUT = "checkout"
    SELL = "sell"


class ExternalAPIAdaptorInterface(ABC):
    """
    Abstract base interface for partner catalog adaptors.

    An adaptor translates one partner's native schema to and from the
    canonical product schema and exposes the remote list, checkout and
    sell primitives. Adaptors only ever see DTOs, never the canonical store.
    """

    # Configuration keys understood by the adaptor, reported by the metadata API
    CONFIG_SCHEMA: Dict[str, Any] = {}

    @property
    @abstractmethod
    def source_name(self) -> str:
        """
        Stable, non-empty provider name used as the registry key.

        Lookups against it are case-insensitive.
        """
        pass

    @abstractmethod
    async def fetch_catalog(self) -> List[Product]:
        """
        Reads the partner catalog and translates it to canonical products.

        Every attribute and content is tagged with this adaptor's provider
        name. Transport and parsing failures are never raised: they are
        logged and reported as an empty list.

        Returns:
            List[Product]: Translated partner products, possibly empty.
        """
        pass

    @abstractmethod
    async def checkout(self, request: CheckoutRequest, product: Product) -> bool:
        """
        Confirms remote availability for a single line item.

        Args:
            request: The line item being checked out.
            product: The canonical product the line item refers to.

        Returns:
            bool: True if the partner confirmed, False if it declined or
                  answered with a non-success or non-boolean response.

        Raises:
            IntegrationException: If the partner could not be reached.
        """
        pass

    @abstractmethod
    async def sell(self, request: CheckoutRequest, product: Product) -> bool:
        """
        Commits a remote sale for a single line item.

        Args:
            request: The line item being sold.
            product: The canonical product the line item refers to.

        Returns:
            bool: True if the partner accepted the sale, False otherwise.

        Raises:
            IntegrationException: If the partner could not be reached.
        """
        pass

    def get_capabilities(self) -> Dict[str, Any]:
        """
        Returns the capabilities supported by this adaptor.

        Returns:
            Dict[str, Any]: Supported operations and adaptor-specific details.
        """
        return {
            "source_name": self.source_name,
            "operations": [capability.value for capability in CapabilityType],
        }
