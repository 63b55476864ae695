from typing import List

from fastapi import APIRouter, Body, Depends, Query, status

from catalog_hub.api.dependencies import get_aggregator, get_dispatcher, get_reconciler
from catalog_hub.core.logging import get_logger
from catalog_hub.domain.models.checkout import BatchOutcome
from catalog_hub.domain.schemas.checkout import (
    CheckoutItem,
    DispatchResponse,
    ReconciliationResponse,
)
from catalog_hub.domain.schemas.product import ProductListResponse, ProductSchema
from catalog_hub.services.aggregation_service import CatalogAggregator
from catalog_hub.services.dispatch_service import CheckoutDispatcher
from catalog_hub.services.reconciliation_service import CatalogReconciler

# Initialize router and logger
adapters_router = APIRouter()
logger = get_logger(__name__)


@adapters_router.get(
    "/products",
    response_model=ProductListResponse,
    status_code=status.HTTP_200_OK,
    summary="Aggregated partner catalog",
    description="Returns the unified snapshot of every registered partner catalog."
)
async def get_aggregated_products(
    refresh: bool = Query(False, description="Bypass the snapshot cache"),
    aggregator: CatalogAggregator = Depends(get_aggregator),
) -> ProductListResponse:
    if refresh:
        await aggregator.invalidate()
    products = await aggregator.list_all(use_cache=True)
    return ProductListResponse(
        data=[ProductSchema.from_domain(p) for p in products],
        total=len(products)
    )


@adapters_router.post(
    "/sell",
    response_model=DispatchResponse,
    status_code=status.HTTP_200_OK,
    summary="Sell a batch of line items",
    description=(
        "Commits each line against its owner: local stock for internal products, "
        "the partner for external ones. Lines are independent."
    )
)
async def sell_products(
    items: List[CheckoutItem] = Body(...),
    dispatcher: CheckoutDispatcher = Depends(get_dispatcher),
) -> DispatchResponse:
    logger.info(f"Selling batch of {len(items)} line items")
    outcome = await dispatcher.sell([item.to_domain() for item in items])
    return DispatchResponse.from_domain(outcome)


@adapters_router.post(
    "/checkout",
    response_model=DispatchResponse,
    status_code=status.HTTP_200_OK,
    summary="Check out a single line item",
    description="Confirms availability with the product owner without committing the sale."
)
async def checkout_product(
    item: CheckoutItem,
    dispatcher: CheckoutDispatcher = Depends(get_dispatcher),
) -> DispatchResponse:
    outcome = await dispatcher.checkout(item.to_domain())
    return DispatchResponse.from_domain(BatchOutcome(items=[outcome]))


@adapters_router.post(
    "/reconcile",
    response_model=ReconciliationResponse,
    status_code=status.HTTP_200_OK,
    summary="Reconcile partner catalogs into the canonical store",
    responses={503: {"description": "No snapshot available"}}
)
async def reconcile_catalog(
    reconciler: CatalogReconciler = Depends(get_reconciler),
) -> ReconciliationResponse:
    report = await reconciler.reconcile()
    return ReconciliationResponse.from_domain(report)
