import threading
from decimal import Decimal

import httpx
import pytest

from catalog_hub.adapters.implementations.partners import CdeAdaptor
from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.core.exceptions import IntegrationException, PersistenceError
from catalog_hub.domain.models.checkout import CheckoutRequest, FailureReason, LineStatus
from catalog_hub.domain.models.product import Product
from catalog_hub.services.dispatch_service import CheckoutDispatcher

from conftest import FakeAdaptor, mock_client, partner_product


async def test_internal_sale_decrements_stock(repository, internal_product):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))

    outcome = await dispatcher.sell([CheckoutRequest(internal_product.id, 3)])

    assert outcome.success
    assert outcome.items[0].status == LineStatus.SOLD
    assert repository.get_by_id(internal_product.id).available_quantity == 2


async def test_internal_sale_beyond_stock_is_rejected_and_leaves_stock(repository, internal_product):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))
    await dispatcher.sell([CheckoutRequest(internal_product.id, 3)])

    outcome = await dispatcher.sell([CheckoutRequest(internal_product.id, 10)])

    line = outcome.items[0]
    assert not outcome.success
    assert line.status == LineStatus.REJECTED
    assert line.reason == FailureReason.INSUFFICIENT_INVENTORY
    assert repository.get_by_id(internal_product.id).available_quantity == 2


async def test_internal_checkout_checks_stock_without_writing(repository, internal_product):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))

    confirmed = await dispatcher.checkout(CheckoutRequest(internal_product.id, 5))
    rejected = await dispatcher.checkout(CheckoutRequest(internal_product.id, 6))

    assert confirmed.status == LineStatus.CONFIRMED
    assert rejected.status == LineStatus.REJECTED
    assert rejected.reason == FailureReason.INSUFFICIENT_INVENTORY
    assert repository.get_by_id(internal_product.id).available_quantity == 5


async def test_external_sale_routes_to_owning_adaptor(repository):
    product = repository.add(partner_product("partnerX", 55, available_quantity=8))
    partner = FakeAdaptor("PartnerX")
    bystander = FakeAdaptor("other")
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([partner, bystander]))

    outcome = await dispatcher.sell([CheckoutRequest(product.id, 3, Decimal("30"))])

    assert outcome.items[0].status == LineStatus.SOLD
    assert outcome.items[0].provider == "partnerX"
    assert [r.quantity for r in partner.sales] == [3]
    assert partner.sales[0].item_total_price == Decimal("30")
    assert bystander.sales == []
    # Partner stock is never written locally
    assert repository.get_by_id(product.id).available_quantity == 8


async def test_external_checkout_uses_checkout_not_sell(repository, cde_product):
    partner = FakeAdaptor("cde")
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([partner]))

    line = await dispatcher.checkout(CheckoutRequest(cde_product.id, 1))

    assert line.status == LineStatus.CONFIRMED
    assert len(partner.checkouts) == 1
    assert partner.sales == []


async def test_partner_declining_is_rejected_upstream(repository, cde_product):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([FakeAdaptor("cde", accept=False)]))

    line = await dispatcher.checkout(CheckoutRequest(cde_product.id, 1))

    assert line.status == LineStatus.REJECTED
    assert line.reason == FailureReason.UPSTREAM


@pytest.mark.parametrize("error", [
    IntegrationException(detail="Request to partner failed"),
    RuntimeError("boom"),
])
async def test_partner_errors_fail_the_line_upstream(repository, cde_product, error):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([FakeAdaptor("cde", order_error=error)]))

    outcome = await dispatcher.sell([CheckoutRequest(cde_product.id, 1)])

    assert outcome.items[0].status == LineStatus.FAILED
    assert outcome.items[0].reason == FailureReason.UPSTREAM


@pytest.mark.parametrize("origin_id, provider", [
    (42, ""),
    (42, "   "),
    (-1, "cde"),
])
async def test_inconsistent_ownership_is_a_configuration_failure(repository, origin_id, provider):
    product = repository.add(Product(name="Broken", origin_id=origin_id, provider=provider, available_quantity=10))
    partner = FakeAdaptor("cde")
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([partner]))

    outcome = await dispatcher.sell([CheckoutRequest(product.id, 1)])

    assert outcome.items[0].status == LineStatus.FAILED
    assert outcome.items[0].reason == FailureReason.CONFIGURATION
    assert partner.sales == []
    assert repository.get_by_id(product.id).available_quantity == 10


async def test_unregistered_provider_is_a_configuration_failure(repository):
    product = repository.add(partner_product("ghost", 9))
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([FakeAdaptor("cde")]))

    line = await dispatcher.checkout(CheckoutRequest(product.id, 1))

    assert line.status == LineStatus.FAILED
    assert line.reason == FailureReason.CONFIGURATION


async def test_unknown_product_is_not_found(repository):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))

    line = await dispatcher.checkout(CheckoutRequest(404, 1))

    assert line.status == LineStatus.FAILED
    assert line.reason == FailureReason.NOT_FOUND


@pytest.mark.parametrize("quantity", [0, -2])
async def test_non_positive_quantity_is_invalid(repository, internal_product, quantity):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))

    outcome = await dispatcher.sell([CheckoutRequest(internal_product.id, quantity)])

    assert outcome.items[0].reason == FailureReason.INVALID_REQUEST
    assert repository.get_by_id(internal_product.id).available_quantity == 5


async def test_store_write_failure_is_a_persistence_failure(repository, internal_product, monkeypatch):
    def failing_decrement(product_id, quantity):
        raise PersistenceError(detail="disk full")

    monkeypatch.setattr(repository, "try_decrement", failing_decrement)
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))

    outcome = await dispatcher.sell([CheckoutRequest(internal_product.id, 1)])

    assert outcome.items[0].status == LineStatus.FAILED
    assert outcome.items[0].reason == FailureReason.PERSISTENCE


async def test_batch_is_not_rolled_back_when_partner_refuses(repository, internal_product, cde_product):
    requests_seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(400, json={"error": "out of stock"})

    async with mock_client(handler) as client:
        adaptor = CdeAdaptor({"base_url": "http://cde.test", "remote_orders": True}, client)
        dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([adaptor]))

        outcome = await dispatcher.sell([
            CheckoutRequest(internal_product.id, 2),
            CheckoutRequest(cde_product.id, 1),
        ])

    assert outcome.success is False
    assert [item.status for item in outcome.items] == [LineStatus.SOLD, LineStatus.REJECTED]
    assert outcome.items[1].reason == FailureReason.UPSTREAM
    assert repository.get_by_id(internal_product.id).available_quantity == 3
    assert len(requests_seen) == 1
    assert requests_seen[0].url.path == "/api/v1/order"


async def test_batch_continues_after_failed_line(repository, internal_product):
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))

    outcome = await dispatcher.sell([
        CheckoutRequest(999, 1),
        CheckoutRequest(internal_product.id, 1),
    ])

    assert [item.status for item in outcome.items] == [LineStatus.FAILED, LineStatus.SOLD]
    assert outcome.to_dict()["success"] is False


async def test_partner_transport_error_fails_line_upstream(repository, cde_product):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        adaptor = CdeAdaptor(
            {"base_url": "http://cde.test", "remote_orders": True, "max_retries": 0},
            client,
        )
        dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([adaptor]))
        line = await dispatcher.checkout(CheckoutRequest(cde_product.id, 1))

    assert line.status == LineStatus.FAILED
    assert line.reason == FailureReason.UPSTREAM


async def test_store_access_runs_off_the_event_loop_thread(repository, internal_product, monkeypatch):
    loop_thread = threading.get_ident()
    store_threads = []

    def recording(method):
        def call(*args):
            store_threads.append(threading.get_ident())
            return method(*args)
        return call

    monkeypatch.setattr(repository, "get_by_id", recording(repository.get_by_id))
    monkeypatch.setattr(repository, "try_decrement", recording(repository.try_decrement))
    dispatcher = CheckoutDispatcher(repository, AdaptorRegistry([]))

    outcome = await dispatcher.sell([CheckoutRequest(internal_product.id, 1)])

    assert outcome.items[0].status == LineStatus.SOLD
    assert len(store_threads) == 2
    assert loop_thread not in store_threads
