from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel

from catalog_hub.adapters.factory import AdaptorFactory
from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.api.dependencies import get_adaptor_factory, get_registry
from catalog_hub.core.logging import get_logger

# Initialize router and logger
metadata_router = APIRouter()
logger = get_logger(__name__)


class AdaptorInfo(BaseModel):
    """Model for basic adaptor information."""
    name: str
    operations: List[str]
    remote_orders: Optional[bool] = None


class AdaptorDetailedInfo(AdaptorInfo):
    """Model for detailed adaptor information."""
    capabilities: Dict[str, Any]
    configuration_schema: Optional[Dict[str, Any]] = None


@metadata_router.get(
    "/adaptors",
    response_model=List[AdaptorInfo],
    status_code=status.HTTP_200_OK,
    summary="List registered adaptors",
    description="Returns every partner adaptor in the registry."
)
async def get_adaptors(
    registry: AdaptorRegistry = Depends(get_registry),
) -> List[AdaptorInfo]:
    adaptors = []
    for adaptor in registry:
        capabilities = adaptor.get_capabilities()
        adaptors.append(AdaptorInfo(
            name=adaptor.source_name,
            operations=capabilities.get("operations", []),
            remote_orders=capabilities.get("remote_orders"),
        ))
    logger.debug(f"Listed {len(adaptors)} adaptors")
    return adaptors


@metadata_router.get(
    "/adaptors/{name}",
    response_model=AdaptorDetailedInfo,
    status_code=status.HTTP_200_OK,
    summary="Get adaptor details",
    description="Returns capabilities and configuration schema of one adaptor.",
    responses={404: {"description": "Adaptor not registered"}}
)
async def get_adaptor_details(
    name: str = Path(..., description="Provider name, case-insensitive"),
    registry: AdaptorRegistry = Depends(get_registry),
    factory: AdaptorFactory = Depends(get_adaptor_factory),
) -> AdaptorDetailedInfo:
    """
    Get detailed information about a registered adaptor.

    Raises:
        AdaptorNotFoundError: If no adaptor is registered under the name
    """
    adaptor = registry.resolve(name)
    capabilities = adaptor.get_capabilities()

    schema = None
    if adaptor.source_name.lower() in factory.get_adaptor_types():
        schema = factory.get_adaptor_config_schema(adaptor.source_name)

    return AdaptorDetailedInfo(
        name=adaptor.source_name,
        operations=capabilities.get("operations", []),
        remote_orders=capabilities.get("remote_orders"),
        capabilities=capabilities,
        configuration_schema=schema,
    )
