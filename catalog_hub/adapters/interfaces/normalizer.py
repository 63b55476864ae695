from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, TypeVar
import logging

from catalog_hub.domain.models.checkout import CheckoutRequest
from catalog_hub.domain.models.product import Product

logger = logging.getLogger(__name__)

# Type variable for the partner-native record type
T = TypeVar('T')


class DataNormalizer(Generic[T], ABC):
    """
    Abstract base interface for partner data normalizers.

    A normalizer owns the translation between one partner's native payloads
    and the canonical product schema, in both directions.

    Type Parameters:
        T: The partner-native record type
    """

    def __init__(self, provider: str):
        """
        Args:
            provider: Provider tag written on every translated product,
                      attribute and content
        """
        self.provider = provider

    @abstractmethod
    def parse_catalog(self, payload: Any) -> List[T]:
        """
        Parses a raw catalog response into partner-native records.

        Raises:
            ValueError: If the payload does not have the partner's shape
        """
        pass

    @abstractmethod
    def normalize_product(self, record: T) -> Product:
        """
        Translates one partner record into a canonical product.

        Absent collections become empty lists.
        """
        pass

    @abstractmethod
    def to_partner_order(self, request: CheckoutRequest, product: Product) -> Dict[str, Any]:
        """
        Builds the partner order payload for one line item.
        """
        pass

    def normalize_catalog(self, payload: Any) -> List[Product]:
        """
        Parses and translates a full catalog response.

        Raises:
            ValueError: If the payload does not have the partner's shape
        """
        records = self.parse_catalog(payload)
        products = [self.normalize_product(record) for record in records]
        logger.debug(f"Normalized {len(products)} products from {self.provider}")
        return products
