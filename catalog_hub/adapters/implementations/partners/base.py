import logging
from typing import Any, Dict, List, Type

import httpx

from catalog_hub.adapters.interfaces.connector import (
    APIConnector,
    HttpMethod,
    RequestConfig,
    parse_bool_payload,
)
from catalog_hub.adapters.interfaces.external_api import ExternalAPIAdaptorInterface
from catalog_hub.adapters.interfaces.normalizer import DataNormalizer
from catalog_hub.core.exceptions import AdaptorConfigError, IntegrationException
from catalog_hub.domain.models.checkout import CheckoutRequest
from catalog_hub.domain.models.product import Product

logger = logging.getLogger(__name__)


class PartnerAdaptor(ExternalAPIAdaptorInterface):
    """
    Base class for HTTP partner adaptors.

    Subclasses declare the partner name, endpoint paths and normalizer;
    this class does the remote calls and the failure isolation.
    """

    SOURCE_NAME: str = ""
    CATALOG_PATH: str = ""
    CHECKOUT_PATH: str = ""
    SELL_PATH: str = ""
    NORMALIZER_CLASS: Type[DataNormalizer] = None

    CONFIG_SCHEMA: Dict[str, Any] = {
        "base_url": {
            "type": "string",
            "required": True,
            "description": "Base URL of the partner API"
        },
        "remote_orders": {
            "type": "boolean",
            "required": False,
            "default": False,
            "description": "Forward checkout and sale requests to the partner order endpoints"
        },
        "timeout": {
            "type": "integer",
            "required": False,
            "default": 10,
            "description": "Request timeout in seconds"
        },
        "max_retries": {
            "type": "integer",
            "required": False,
            "default": 3,
            "description": "Retry attempts for catalog reads"
        }
    }

    def __init__(self, config: Dict[str, Any], client: httpx.AsyncClient):
        """
        Initialize the adaptor.

        Args:
            config: Adaptor configuration (see CONFIG_SCHEMA)
            client: Shared HTTP client

        Raises:
            AdaptorConfigError: If the base URL is missing or malformed
        """
        base_url = config.get("base_url")
        if not base_url or not APIConnector.validate_url(base_url):
            raise AdaptorConfigError(
                f"Adaptor '{self.SOURCE_NAME}' requires a valid base_url, got {base_url!r}"
            )

        self.base_url = base_url
        self.remote_orders = bool(config.get("remote_orders", False))
        self.connector = APIConnector(client, RequestConfig.from_config(config))
        self.normalizer = self.NORMALIZER_CLASS(self.source_name)

    @property
    def source_name(self) -> str:
        return self.SOURCE_NAME

    async def fetch_catalog(self) -> List[Product]:
        url = self.connector.build_url(self.base_url, self.CATALOG_PATH)

        try:
            payload = await self.connector.get_json(url)
            products = self.normalizer.normalize_catalog(payload)
        except IntegrationException as e:
            logger.warning(f"Catalog read from {self.source_name} failed: {e.detail}")
            return []
        except ValueError as e:
            logger.warning(f"Catalog payload from {self.source_name} could not be parsed: {str(e)}")
            return []
        except Exception as e:
            logger.error(f"Unexpected error reading catalog from {self.source_name}: {str(e)}", exc_info=True)
            return []

        logger.info(f"Fetched {len(products)} products from {self.source_name}")
        return products

    async def checkout(self, request: CheckoutRequest, product: Product) -> bool:
        return await self._submit_order(self.CHECKOUT_PATH, request, product, retry=True)

    async def sell(self, request: CheckoutRequest, product: Product) -> bool:
        return await self._submit_order(self.SELL_PATH, request, product, retry=False)

    async def _submit_order(
        self,
        path: str,
        request: CheckoutRequest,
        product: Product,
        retry: bool
    ) -> bool:
        """
        POST an order payload to the partner and read its boolean answer.

        Raises:
            IntegrationException: If the partner could not be reached
        """
        if not self.remote_orders:
            logger.info(
                f"Order for product {product.id} acknowledged without contacting {self.source_name}: "
                f"remote orders are disabled, no partner inventory was reserved"
            )
            return True

        url = self.connector.build_url(self.base_url, path)
        payload = self.normalizer.to_partner_order(request, product)
        response = await self.connector.request(HttpMethod.POST, url, data=payload, retry=retry)

        if not response.is_success:
            logger.warning(
                f"{self.source_name} rejected order for product {product.id} "
                f"with status {response.status_code}"
            )
            return False

        accepted = parse_bool_payload(response)
        if accepted is None:
            logger.warning(
                f"{self.source_name} answered order for product {product.id} with a non-boolean body"
            )
            return False
        return accepted

    def get_capabilities(self) -> Dict[str, Any]:
        capabilities = super().get_capabilities()
        capabilities.update({
            "base_url": self.base_url,
            "remote_orders": self.remote_orders,
            "catalog_path": self.CATALOG_PATH,
        })
        return capabilities
