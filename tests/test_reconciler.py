import asyncio
import threading
from decimal import Decimal

import httpx
import pytest
from sqlalchemy import func, select

from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.core.exceptions import SnapshotUnavailableError
from catalog_hub.domain.models.product import Product, ProductAttribute, ProductContent
from catalog_hub.infrastructure.database.models import (
    ProductAttributeEntity,
    ProductContentEntity,
    ProductEntity,
)
from catalog_hub.services.aggregation_service import CatalogAggregator
from catalog_hub.services.reconciliation_service import (
    AggregatorSnapshotSource,
    CatalogReconciler,
    RemoteSnapshotSource,
    SnapshotSource,
    reconcile_periodically,
)

from conftest import FakeAdaptor, mock_client, partner_product


class StaticSource(SnapshotSource):
    def __init__(self, products):
        self.products = products

    async def fetch_snapshot(self):
        return list(self.products)


class UnavailableSource(SnapshotSource):
    async def fetch_snapshot(self):
        raise SnapshotUnavailableError()


def _count(session, entity):
    return session.execute(select(func.count()).select_from(entity)).scalar_one()


def _lamp(price, attributes, contents=None):
    return partner_product(
        "cde",
        100,
        name="Desk lamp",
        price=Decimal(price),
        currency="EUR",
        available_quantity=12,
        attributes=attributes,
        contents=contents or [],
    )


async def test_new_product_is_inserted_then_updated_in_place(repository, db_session):
    first = _lamp(
        "20.00",
        [ProductAttribute(key="color", value="red", provider="cde")],
        [ProductContent(type="image", url="http://cde.test/1.png", provider="cde")],
    )

    report = await CatalogReconciler(StaticSource([first]), repository).reconcile()

    assert (report.inserted, report.updated, report.failed) == (1, 0, 0)
    stored = repository.find_by_origin(100, "cde")
    assert stored.id is not None
    assert [(a.key, a.value) for a in stored.attributes] == [("color", "red")]
    assert len(stored.contents) == 1
    owner_ids = db_session.execute(select(ProductAttributeEntity.product_id)).scalars().all()
    assert owner_ids == [stored.id]

    second = _lamp(
        "25.00",
        [
            ProductAttribute(key="color", value="blue", provider="cde"),
            ProductAttribute(key="bulb", value="E27", provider="cde"),
        ],
    )
    report = await CatalogReconciler(StaticSource([second]), repository).reconcile()

    assert (report.inserted, report.updated, report.failed) == (0, 1, 0)
    assert _count(db_session, ProductEntity) == 1
    updated = repository.find_by_origin(100, "cde")
    assert updated.id == stored.id
    assert updated.price == Decimal("25.00")
    assert sorted((a.key, a.value) for a in updated.attributes) == [("bulb", "E27"), ("color", "blue")]
    assert updated.contents == []
    assert _count(db_session, ProductAttributeEntity) == 2
    assert _count(db_session, ProductContentEntity) == 0


async def test_untagged_children_survive_update(repository):
    stored = repository.add(_lamp("20.00", [
        ProductAttribute(key="color", value="red", provider="cde"),
        ProductAttribute(key="shelf", value="B4"),
    ]))

    await CatalogReconciler(StaticSource([_lamp("20.00", [])]), repository).reconcile()

    kept = repository.get_by_id(stored.id)
    assert [(a.key, a.provider) for a in kept.attributes] == [("shelf", "")]


async def test_same_origin_id_from_different_providers_are_distinct(repository, db_session):
    snapshot = [partner_product("cde", 7, "cde seven"), partner_product("abc", 7, "abc seven")]

    report = await CatalogReconciler(StaticSource(snapshot), repository).reconcile()

    assert report.inserted == 2
    assert _count(db_session, ProductEntity) == 2


async def test_internal_products_are_left_alone(repository, internal_product):
    report = await CatalogReconciler(StaticSource([partner_product("cde", 1)]), repository).reconcile()

    assert report.inserted == 1
    assert repository.get_by_id(internal_product.id).available_quantity == 5
    assert len(repository.list_internal()) == 1


async def test_bad_record_is_counted_and_run_continues(repository):
    snapshot = [
        partner_product("cde", 1, "broken", available_quantity=-3),
        Product(name="no owner", origin_id=5),
        partner_product("cde", 2, "fine"),
    ]

    report = await CatalogReconciler(StaticSource(snapshot), repository).reconcile()

    assert (report.inserted, report.updated, report.failed) == (1, 0, 2)
    assert repository.find_by_origin(2, "cde") is not None
    assert repository.find_by_origin(1, "cde") is None


async def test_unavailable_snapshot_aborts_without_writes(repository, db_session):
    with pytest.raises(SnapshotUnavailableError):
        await CatalogReconciler(UnavailableSource(), repository).reconcile()

    assert _count(db_session, ProductEntity) == 0


async def test_aggregator_snapshot_source_mirrors_partners(repository):
    registry = AdaptorRegistry([
        FakeAdaptor("cde", [partner_product("cde", 1, "a")]),
        FakeAdaptor("abc", fetch_error=RuntimeError("down")),
    ])
    source = AggregatorSnapshotSource(CatalogAggregator(registry))

    report = await CatalogReconciler(source, repository).reconcile()

    assert report.inserted == 1
    assert [p.name for p in repository.list_all()] == ["a"]


async def test_remote_snapshot_source_reads_hub_endpoint(repository):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/adapters/products"
        return httpx.Response(200, json={"data": [{
            "originId": 100,
            "provider": "cde",
            "name": "Remote lamp",
            "availableQuantity": 4,
            "price": "19.90",
            "currency": "EUR",
            "attributes": [{"key": "color", "value": "green", "provider": "cde"}],
        }], "total": 1})

    async with mock_client(handler) as client:
        source = RemoteSnapshotSource("http://hub.test", client)
        report = await CatalogReconciler(source, repository).reconcile()

    assert report.inserted == 1
    stored = repository.find_by_origin(100, "cde")
    assert stored.price == Decimal("19.90")
    assert stored.attributes[0].value == "green"


async def test_remote_snapshot_source_unreachable(repository):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async with mock_client(handler) as client:
        source = RemoteSnapshotSource("http://hub.test", client)
        with pytest.raises(SnapshotUnavailableError):
            await CatalogReconciler(source, repository).reconcile()


async def test_remote_snapshot_skips_invalid_items(repository):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [
            {"originId": 1, "provider": "cde", "name": "oversold", "availableQuantity": -2},
            {"originId": 2, "provider": "cde", "availableQuantity": 1},
            {"originId": 3, "provider": "cde", "name": "fine", "availableQuantity": 1},
        ]})

    async with mock_client(handler) as client:
        snapshot = await RemoteSnapshotSource("http://hub.test", client).fetch_snapshot()

    assert [p.name for p in snapshot] == ["fine"]


async def test_store_writes_run_off_the_event_loop_thread(repository, monkeypatch):
    loop_thread = threading.get_ident()
    write_threads = []
    original_find = repository.find_by_origin

    def recording_find(origin_id, provider):
        write_threads.append(threading.get_ident())
        return original_find(origin_id, provider)

    monkeypatch.setattr(repository, "find_by_origin", recording_find)

    report = await CatalogReconciler(StaticSource([partner_product("cde", 1, "a")]), repository).reconcile()

    assert report.inserted == 1
    assert write_threads and loop_thread not in write_threads


async def test_periodic_reconciliation_survives_failures(session_factory):
    runs = []

    class FlakySource(SnapshotSource):
        async def fetch_snapshot(self):
            runs.append(len(runs))
            if len(runs) == 1:
                raise SnapshotUnavailableError()
            return [partner_product("cde", 3, "periodic")]

    task = asyncio.create_task(reconcile_periodically(FlakySource(), session_factory, 0.01))
    for _ in range(200):
        if len(runs) >= 2:
            break
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(runs) >= 2
    session = session_factory()
    try:
        assert session.execute(
            select(ProductEntity.name).where(ProductEntity.origin_id == 3)
        ).scalar_one() == "periodic"
    finally:
        session.close()
