import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List

from catalog_hub.adapters.interfaces.external_api import ExternalAPIAdaptorInterface
from catalog_hub.core.exceptions import AdaptorConfigError, AdaptorNotFoundError

logger = logging.getLogger(__name__)


class AdaptorRegistry:
    """
    Registry of configured adaptor instances.

    Maps lower-cased provider names to the adaptor serving them. The map is
    built once from the full adaptor set and is read-only afterwards, so
    concurrent readers need no locking.
    """

    def __init__(self, adaptors: Iterable[ExternalAPIAdaptorInterface]):
        """
        Build the registry.

        Args:
            adaptors: Every configured adaptor

        Raises:
            ValueError: If no adaptor set is given
            AdaptorConfigError: If an adaptor has an empty name or two
                                adaptors share a name
        """
        if adaptors is None:
            raise ValueError("Adaptor set is required to build the registry")

        adaptor_map: Dict[str, ExternalAPIAdaptorInterface] = {}
        for adaptor in adaptors:
            if not isinstance(adaptor, ExternalAPIAdaptorInterface):
                raise AdaptorConfigError(
                    f"{type(adaptor).__name__} does not implement ExternalAPIAdaptorInterface"
                )

            name = (adaptor.source_name or "").strip()
            if not name:
                raise AdaptorConfigError(
                    f"Adaptor {type(adaptor).__name__} has an empty source name"
                )

            key = name.lower()
            if key in adaptor_map:
                raise AdaptorConfigError(
                    f"Adaptor source name '{name}' is already registered",
                    context={"provider": name},
                )

            adaptor_map[key] = adaptor
            logger.info(f"Registered adaptor: {name}")

        self._adaptors = MappingProxyType(adaptor_map)

    def resolve(self, provider_name: str) -> ExternalAPIAdaptorInterface:
        """
        Retrieve the adaptor registered under a provider name.

        Args:
            provider_name: Provider tag, matched case-insensitively

        Returns:
            The registered adaptor

        Raises:
            AdaptorNotFoundError: If no adaptor is registered under the name
        """
        adaptor = self._adaptors.get((provider_name or "").strip().lower())
        if adaptor is None:
            raise AdaptorNotFoundError(provider_name)
        return adaptor

    def list(self) -> List[str]:
        """
        List all registered provider names.

        Returns:
            List of registered source names
        """
        return [adaptor.source_name for adaptor in self._adaptors.values()]

    def is_registered(self, provider_name: str) -> bool:
        """
        Check if a provider name is registered.
        """
        return (provider_name or "").strip().lower() in self._adaptors

    def __iter__(self) -> Iterator[ExternalAPIAdaptorInterface]:
        return iter(self._adaptors.values())

    def __len__(self) -> int:
        return len(self._adaptors)
