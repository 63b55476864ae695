from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from catalog_hub.adapters.factory import AdaptorFactory
from catalog_hub.adapters.registry import AdaptorRegistry
from catalog_hub.api import dependencies
from catalog_hub.infrastructure.cache.memory_cache import MemoryCache
from catalog_hub.infrastructure.database.session import get_db
from catalog_hub.main import create_application
from catalog_hub.services.aggregation_service import CatalogAggregator
from catalog_hub.services.reconciliation_service import AggregatorSnapshotSource, SnapshotSource
from catalog_hub.core.exceptions import SnapshotUnavailableError

from conftest import FakeAdaptor, partner_product

API = "/api/v1"


@pytest.fixture
def partner():
    return FakeAdaptor("cde", [partner_product("cde", 100, "Desk lamp", price=Decimal("25.00"), available_quantity=3)])


@pytest.fixture
def app(db_session, partner):
    registry = AdaptorRegistry([partner])
    cache = MemoryCache()
    aggregator = CatalogAggregator(registry, cache=cache)

    application = create_application()

    def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[dependencies.get_registry] = lambda: registry
    application.dependency_overrides[dependencies.get_cache_service] = lambda: cache
    application.dependency_overrides[dependencies.get_aggregator] = lambda: aggregator
    application.dependency_overrides[dependencies.get_adaptor_factory] = lambda: AdaptorFactory()
    application.dependency_overrides[dependencies.get_snapshot_source] = lambda: AggregatorSnapshotSource(aggregator)
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


def test_health(client):
    response = client.get(f"{API}/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Correlation-ID" in response.headers


def test_detailed_health_reports_dependencies(client):
    body = client.get(f"{API}/health/detailed").json()

    assert body["status"] == "ok"
    by_name = {d["name"]: d for d in body["dependencies"]}
    assert by_name["database"]["status"] == "ok"
    assert by_name["adaptor_registry"]["details"] == {"adaptors": ["cde"]}


def test_correlation_id_is_echoed(client):
    response = client.get(f"{API}/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"


def test_aggregated_products(client):
    body = client.get(f"{API}/adapters/products").json()

    assert body["total"] == 1
    assert body["data"][0]["originId"] == 100
    assert body["data"][0]["provider"] == "cde"
    assert body["data"][0]["availableQuantity"] == 3


def test_sell_batch_reports_each_line(client, internal_product, cde_product, partner):
    response = client.post(f"{API}/adapters/sell", json=[
        {"productId": internal_product.id, "quantity": 2},
        {"productId": cde_product.id, "quantity": 1, "itemTotalPrice": "30.00"},
        {"productId": 999, "quantity": 1},
    ])

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert [item["status"] for item in body["items"]] == ["sold", "sold", "failed"]
    assert body["items"][2]["reason"] == "not_found"
    assert len(partner.sales) == 1


def test_checkout_single_item(client, internal_product):
    body = client.post(
        f"{API}/adapters/checkout",
        json={"productId": internal_product.id, "quantity": 9},
    ).json()

    assert body["success"] is False
    assert body["items"][0]["status"] == "rejected"
    assert body["items"][0]["reason"] == "insufficient_inventory"


def test_checkout_rejects_non_positive_quantity(client, internal_product):
    response = client.post(f"{API}/adapters/checkout", json={"productId": internal_product.id, "quantity": 0})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_reconcile_mirrors_partner_catalog(client):
    response = client.post(f"{API}/adapters/reconcile")

    assert response.status_code == 200
    body = response.json()
    assert (body["inserted"], body["updated"], body["failed"]) == (1, 0, 0)

    products = client.get(f"{API}/products").json()
    assert products["total"] == 1
    assert products["data"][0]["name"] == "Desk lamp"


def test_reconcile_without_snapshot_is_unavailable(app, client):
    class Unavailable(SnapshotSource):
        async def fetch_snapshot(self):
            raise SnapshotUnavailableError()

    app.dependency_overrides[dependencies.get_snapshot_source] = lambda: Unavailable()

    response = client.post(f"{API}/adapters/reconcile")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "snapshot_unavailable"


def test_product_lookup_and_filters(client, internal_product, cde_product):
    assert client.get(f"{API}/products/{internal_product.id}").json()["name"] == "Local mug"
    internal = client.get(f"{API}/products", params={"internal_only": True}).json()
    assert [p["id"] for p in internal["data"]] == [internal_product.id]
    owned = client.get(f"{API}/products", params={"owner": 7}).json()
    assert owned["total"] == 1
    assert client.get(f"{API}/products/categories").json() == []


def test_unknown_product_is_404(client):
    response = client.get(f"{API}/products/4040")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "product_not_found"


def test_only_internal_products_can_be_deleted(client, internal_product, cde_product):
    assert client.delete(f"{API}/products/{cde_product.id}").status_code == 404
    assert client.delete(f"{API}/products/{internal_product.id}").status_code == 204
    assert client.get(f"{API}/products/{internal_product.id}").status_code == 404


def test_adaptor_metadata(client):
    listed = client.get(f"{API}/metadata/adaptors").json()
    assert [a["name"] for a in listed] == ["cde"]

    detail = client.get(f"{API}/metadata/adaptors/CDE").json()
    assert "checkout" in detail["operations"]
    assert detail["configuration_schema"]["base_url"]["type"] == "string"

    missing = client.get(f"{API}/metadata/adaptors/nope")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "adaptor_not_found"


def test_negative_stock_record_does_not_break_listing(client, partner):
    partner.products.append(partner_product("cde", 101, "Oversold", available_quantity=-4))

    response = client.get(f"{API}/adapters/products")

    assert response.status_code == 200
    assert [p["name"] for p in response.json()["data"]] == ["Desk lamp"]


def test_local_attribute_lifecycle(client, internal_product):
    url = f"{API}/products/{internal_product.id}/attributes"

    created = client.post(url, json=[{"key": "material", "value": "ceramic"}])
    assert created.status_code == 201
    attribute = created.json()[0]
    assert (attribute["key"], attribute["provider"]) == ("material", "")

    updated = client.put(f"{url}/{attribute['attributeId']}", json={"key": "material", "value": "stoneware"})
    assert updated.json()["value"] == "stoneware"
    assert [a["value"] for a in client.get(url).json()] == ["stoneware"]

    assert client.delete(f"{url}/{attribute['attributeId']}").status_code == 204
    assert client.get(url).json() == []


def test_partner_attributes_are_read_only(client, cde_product):
    url = f"{API}/products/{cde_product.id}/attributes"
    partner_attribute = client.get(url).json()[0]

    response = client.put(f"{url}/{partner_attribute['attributeId']}", json={"key": "color", "value": "blue"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "attribute_read_only"
    assert client.delete(f"{url}/{partner_attribute['attributeId']}").status_code == 409


def test_attributes_of_unknown_product_are_404(client):
    assert client.get(f"{API}/products/4040/attributes").status_code == 404
    missing = client.put(f"{API}/products/4040/attributes/1", json={"key": "k", "value": "v"})
    assert missing.json()["error"]["code"] == "attribute_not_found"
