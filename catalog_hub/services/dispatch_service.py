from typing import Iterable

from fastapi.concurrency import run_in_threadpool

from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.core.exceptions import (
    AdaptorNotFoundError,
    IntegrationException,
    PersistenceError,
)
from catalog_hub.core.logging import get_logger
from catalog_hub.domain.models.checkout import (
    BatchOutcome,
    CheckoutRequest,
    FailureReason,
    LineOutcome,
    LineStatus,
)
from catalog_hub.domain.models.product import Product
from catalog_hub.infrastructure.repositories.product_repository import ProductRepository

logger = get_logger(__name__)


class CheckoutDispatcher:
    """
    Routes checkout and sale line items to the party that owns the stock.

    Internal products are served from the local store; external products
    are forwarded to the adaptor registered under their provider tag and
    never touch local stock. Every line ends in a LineOutcome, failures
    are never raised past this class.
    """

    def __init__(self, repository: ProductRepository, registry: AdaptorRegistry):
        self.repository = repository
        self.registry = registry

    async def checkout(self, request: CheckoutRequest) -> LineOutcome:
        """Confirm availability of a single line item without committing it."""
        return await self._dispatch(request, commit=False)

    async def sell(self, requests: Iterable[CheckoutRequest]) -> BatchOutcome:
        """
        Commit a batch of sales.

        Lines are processed one after another and independently. A rejected
        or failed line does not stop the batch, and lines already sold are
        not rolled back.
        """
        outcome = BatchOutcome()
        for request in requests:
            outcome.items.append(await self._dispatch(request, commit=True))

        if not outcome.success:
            failed = [item.product_id for item in outcome.items if not item.succeeded]
            logger.info(f"Sale batch partially failed, unsuccessful lines: {failed}")
        return outcome

    async def _dispatch(self, request: CheckoutRequest, commit: bool) -> LineOutcome:
        if request.quantity is None or request.quantity <= 0:
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.INVALID_REQUEST,
                detail="Quantity must be positive",
            )

        try:
            product = await run_in_threadpool(self.repository.get_by_id, request.product_id)
        except PersistenceError as e:
            logger.error(f"Store read failed for product {request.product_id}: {e.detail}")
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.PERSISTENCE,
                detail=e.detail,
            )

        if product is None:
            logger.info(f"Product {request.product_id} not found")
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.NOT_FOUND,
                detail=f"Product with id '{request.product_id}' not found",
            )

        if product.is_internal:
            if commit:
                return await self._sell_internal(request)
            return self._checkout_internal(request, product)
        return await self._dispatch_external(request, product, commit)

    async def _sell_internal(self, request: CheckoutRequest) -> LineOutcome:
        try:
            decremented = await run_in_threadpool(
                self.repository.try_decrement, request.product_id, request.quantity
            )
        except PersistenceError as e:
            logger.error(f"Stock write failed for product {request.product_id}: {e.detail}")
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.PERSISTENCE,
                detail=e.detail,
            )

        if not decremented:
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.REJECTED,
                reason=FailureReason.INSUFFICIENT_INVENTORY,
                detail=f"Insufficient inventory for product '{request.product_id}'",
            )
        return LineOutcome(product_id=request.product_id, status=LineStatus.SOLD)

    def _checkout_internal(self, request: CheckoutRequest, product: Product) -> LineOutcome:
        if product.can_cover(request.quantity):
            return LineOutcome(product_id=request.product_id, status=LineStatus.CONFIRMED)
        return LineOutcome(
            product_id=request.product_id,
            status=LineStatus.REJECTED,
            reason=FailureReason.INSUFFICIENT_INVENTORY,
            detail=f"Insufficient inventory for product '{request.product_id}'",
        )

    async def _dispatch_external(
        self, request: CheckoutRequest, product: Product, commit: bool
    ) -> LineOutcome:
        violation = product.ownership_violation()
        if violation:
            logger.error(
                f"Inconsistent ownership for product {product.id} (provider '{product.provider}'): {violation}"
            )
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.CONFIGURATION,
                detail=violation,
                provider=product.provider,
            )

        try:
            adaptor = self.registry.resolve(product.provider)
        except AdaptorNotFoundError as e:
            logger.error(f"No adaptor for product {product.id}: {e.detail}")
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.CONFIGURATION,
                detail=e.detail,
                provider=product.provider,
            )

        operation = "sell" if commit else "checkout"
        try:
            if commit:
                accepted = await adaptor.sell(request, product)
            else:
                accepted = await adaptor.checkout(request, product)
        except IntegrationException as e:
            logger.error(
                f"Partner {operation} failed for line item {request.product_id}: {e.detail}"
            )
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.UPSTREAM,
                detail=e.detail,
                provider=product.provider,
            )
        except Exception as e:
            logger.exception(
                f"Unexpected error in partner {operation} for line item {request.product_id} "
                f"(provider '{product.provider}', origin id {product.origin_id}, "
                f"quantity {request.quantity}): {str(e)}"
            )
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.FAILED,
                reason=FailureReason.UPSTREAM,
                detail=str(e),
                provider=product.provider,
            )

        if not accepted:
            return LineOutcome(
                product_id=request.product_id,
                status=LineStatus.REJECTED,
                reason=FailureReason.UPSTREAM,
                detail=f"Partner '{adaptor.source_name}' declined the {operation}",
                provider=product.provider,
            )

        status = LineStatus.SOLD if commit else LineStatus.CONFIRMED
        return LineOutcome(product_id=request.product_id, status=status, provider=product.provider)
