import logging
from typing import Any, Dict, List, Optional, Type

import httpx

from catalog_hub.adapters.implementations import ADAPTOR_IMPLEMENTATIONS
from catalog_hub.adapters.interfaces.external_api import ExternalAPIAdaptorInterface
from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.core.config import Settings
from catalog_hub.core.exceptions import AdaptorConfigError, AdaptorNotFoundError

logger = logging.getLogger(__name__)


class AdaptorFactory:
    """
    Factory for creating adaptor instances.

    Knows the finite set of adaptor implementations, instantiates the
    enabled ones with their configuration and builds the registry.
    """

    def __init__(self, implementations: Optional[Dict[str, Type[ExternalAPIAdaptorInterface]]] = None):
        """
        Initialize the adaptor factory.

        Args:
            implementations: Optional mapping of adaptor type to class,
                             defaults to ADAPTOR_IMPLEMENTATIONS
        """
        self.implementations = dict(implementations or ADAPTOR_IMPLEMENTATIONS)

    def create_adaptor(
        self,
        adaptor_type: str,
        config: Dict[str, Any],
        client: httpx.AsyncClient
    ) -> ExternalAPIAdaptorInterface:
        """
        Create an adaptor instance of the specified type with the given configuration.

        Args:
            adaptor_type: Type of adaptor to create (e.g., 'cde', 'abc')
            config: Configuration for the adaptor
            client: Shared HTTP client

        Returns:
            An instance of the requested adaptor

        Raises:
            AdaptorNotFoundError: If the adaptor type is not known
            AdaptorConfigError: If the configuration is invalid
        """
        adaptor_class = self.implementations.get(adaptor_type.lower())
        if not adaptor_class:
            logger.error(f"Adaptor type '{adaptor_type}' not found")
            raise AdaptorNotFoundError(adaptor_type)

        try:
            adaptor = adaptor_class(config, client)
        except AdaptorConfigError as e:
            logger.error(f"Invalid configuration for {adaptor_type} adaptor: {e.detail}")
            raise
        except (TypeError, ValueError) as e:
            logger.error(f"Error creating {adaptor_type} adaptor: {str(e)}")
            raise AdaptorConfigError(f"Failed to create {adaptor_type} adaptor: {str(e)}")

        logger.info(f"Created {adaptor_type} adaptor")
        return adaptor

    def build_registry(self, settings: Settings, client: httpx.AsyncClient) -> AdaptorRegistry:
        """
        Instantiate every enabled adaptor and build the registry from them.

        Args:
            settings: Application settings
            client: Shared HTTP client

        Returns:
            The populated registry
        """
        adaptors = [
            self.create_adaptor(adaptor_type, settings.get_adaptor_config(adaptor_type), client)
            for adaptor_type in settings.ENABLED_ADAPTORS
        ]
        return AdaptorRegistry(adaptors)

    def get_adaptor_types(self) -> List[str]:
        """
        List all available adaptor types.
        """
        return list(self.implementations.keys())

    def get_adaptor_config_schema(self, adaptor_type: str) -> Dict[str, Any]:
        """
        Get the configuration schema for an adaptor type.

        Raises:
            AdaptorNotFoundError: If the adaptor type is not known
        """
        adaptor_class = self.implementations.get(adaptor_type.lower())

        if not adaptor_class:
            raise AdaptorNotFoundError(adaptor_type)

        return adaptor_class.CONFIG_SCHEMA
