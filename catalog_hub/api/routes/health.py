from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_hub import __version__
from catalog_hub.adapters.interfaces.cache import CacheStrategy
from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.api.dependencies import get_cache_service, get_registry
from catalog_hub.core.logging import get_logger
from catalog_hub.infrastructure.database.session import get_db

# Initialize router and logger
health_router = APIRouter()
logger = get_logger(__name__)


class HealthStatus(BaseModel):
    """Basic health status response model."""
    status: str
    version: str = __version__
    service: str = "Catalog Hub"


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str
    details: Optional[Dict] = None


class DetailedHealthStatus(HealthStatus):
    """Detailed health status with dependency information."""
    dependencies: List[DependencyStatus]


@health_router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns basic health status of the service."
)
async def get_health() -> HealthStatus:
    logger.debug("Health check requested")
    return HealthStatus(status="ok")


@health_router.get(
    "/detailed",
    response_model=DetailedHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
    description="Returns health status of the database, the snapshot cache and the adaptor registry."
)
async def get_detailed_health(
    db: Session = Depends(get_db),
    cache: CacheStrategy = Depends(get_cache_service),
    registry: AdaptorRegistry = Depends(get_registry),
) -> DetailedHealthStatus:
    """
    Detailed health check endpoint with dependency status.

    The overall status is "degraded" when any dependency is unhealthy.
    """
    logger.debug("Detailed health check requested")
    dependencies = []

    try:
        await run_in_threadpool(db.execute, text("SELECT 1"))
        dependencies.append(DependencyStatus(name="database", status="ok"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        dependencies.append(DependencyStatus(name="database", status="error", details={"error": str(e)}))

    cache_stats = await cache.get_stats()
    cache_ok = cache_stats.get("status", "healthy") == "healthy"
    dependencies.append(DependencyStatus(
        name="cache",
        status="ok" if cache_ok else "error",
        details=cache_stats
    ))

    dependencies.append(DependencyStatus(
        name="adaptor_registry",
        status="ok",
        details={"adaptors": registry.list()}
    ))

    overall = "ok" if all(d.status == "ok" for d in dependencies) else "degraded"
    return DetailedHealthStatus(status=overall, dependencies=dependencies)
