import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from catalog_hub.adapters.factory import AdaptorFactory
from catalog_hub.adapters.interfaces.connector import RequestConfig
from catalog_hub.api.error_handlers import register_exception_handlers
from catalog_hub.core.config import get_settings, load_env_file
from catalog_hub.core.exceptions import CacheError
from catalog_hub.core.logging import configure_logging, get_logger, set_correlation_id
from catalog_hub.infrastructure.cache import MemoryCache, RedisCache, create_cache
from catalog_hub.infrastructure.database.models import Base
from catalog_hub.infrastructure.database.session import SessionLocal, engine
from catalog_hub.services.aggregation_service import CatalogAggregator
from catalog_hub.services.reconciliation_service import (
    AggregatorSnapshotSource,
    RemoteSnapshotSource,
    reconcile_periodically,
)

# Load environment variables and configure logging early
load_env_file()
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Builds the shared HTTP client, the adaptor registry, the snapshot cache
    and the services on startup, and releases them on shutdown.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.PROJECT_NAME}")

    Base.metadata.create_all(bind=engine)

    http_client = httpx.AsyncClient()
    factory = AdaptorFactory()
    registry = factory.build_registry(settings, http_client)

    cache = create_cache(settings)
    if isinstance(cache, RedisCache):
        try:
            await cache.ping()
        except CacheError as e:
            logger.warning(f"Redis unavailable, using in-memory snapshot cache: {str(e)}")
            await cache.close()
            cache = MemoryCache(default_ttl=settings.CACHE_TTL)

    aggregator = CatalogAggregator(
        registry,
        cache=cache,
        timeout=settings.ADAPTOR_FETCH_TIMEOUT,
        cache_ttl=settings.CACHE_TTL,
    )

    if settings.SNAPSHOT_SOURCE_URL:
        snapshot_source = RemoteSnapshotSource(
            settings.SNAPSHOT_SOURCE_URL,
            http_client,
            RequestConfig(
                max_retries=settings.MAX_RETRIES,
                timeout=settings.DEFAULT_TIMEOUT,
                backoff_factor=settings.RETRY_BACKOFF_FACTOR,
            ),
        )
    else:
        snapshot_source = AggregatorSnapshotSource(aggregator)

    app.state.adaptor_factory = factory
    app.state.registry = registry
    app.state.cache = cache
    app.state.aggregator = aggregator
    app.state.snapshot_source = snapshot_source

    reconcile_task = None
    if settings.RECONCILE_INTERVAL_SECONDS > 0:
        reconcile_task = asyncio.create_task(
            reconcile_periodically(snapshot_source, SessionLocal, settings.RECONCILE_INTERVAL_SECONDS)
        )

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    if reconcile_task is not None:
        reconcile_task.cancel()
        try:
            await reconcile_task
        except asyncio.CancelledError:
            pass
    await cache.close()
    await http_client.aclose()


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    configure_middleware(app)
    register_exception_handlers(app)
    register_routers(app)

    return app


def configure_middleware(app: FastAPI) -> None:
    """
    Configure middleware components for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracking middleware
    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {str(e)}",
                extra={"data": {
                    "request_path": request.url.path,
                    "method": request.method,
                    "process_time_ms": round(process_time * 1000, 2),
                }},
                exc_info=True
            )
            raise

        response.headers["X-Correlation-ID"] = correlation_id
        process_time = time.time() - start_time
        logger.info(
            "Request completed",
            extra={"data": {
                "request_path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            }}
        )
        return response


def register_routers(app: FastAPI) -> None:
    """
    Register API routers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    # Import routers here to avoid circular imports
    from catalog_hub.api.routes.adapters import adapters_router
    from catalog_hub.api.routes.health import health_router
    from catalog_hub.api.routes.metadata import metadata_router
    from catalog_hub.api.routes.products import products_router

    app.include_router(health_router, prefix=f"{settings.API_V1_STR}/health", tags=["Health"])
    app.include_router(metadata_router, prefix=f"{settings.API_V1_STR}/metadata", tags=["Metadata"])
    app.include_router(adapters_router, prefix=f"{settings.API_V1_STR}/adapters", tags=["Adapters"])
    app.include_router(products_router, prefix=f"{settings.API_V1_STR}/products", tags=["Products"])


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog_hub.main:app", host="0.0.0.0", port=8000, reload=True)
