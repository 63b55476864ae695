import asyncio
from decimal import Decimal
from typing import List, Optional

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_hub.adapters.interfaces.external_api import ExternalAPIAdaptorInterface
from catalog_hub.domain.models.checkout import CheckoutRequest
from catalog_hub.domain.models.product import Product, ProductAttribute, ProductContent
from catalog_hub.infrastructure.database.models import Base
from catalog_hub.infrastructure.repositories.product_repository import ProductRepository


class FakeAdaptor(ExternalAPIAdaptorInterface):
    """In-memory partner used to drive the services without HTTP."""

    def __init__(
        self,
        name: str,
        products: Optional[List[Product]] = None,
        accept: bool = True,
        order_error: Optional[Exception] = None,
        fetch_error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self._name = name
        self.products = products or []
        self.accept = accept
        self.order_error = order_error
        self.fetch_error = fetch_error
        self.delay = delay
        self.checkouts: List[CheckoutRequest] = []
        self.sales: List[CheckoutRequest] = []

    @property
    def source_name(self) -> str:
        return self._name

    async def fetch_catalog(self) -> List[Product]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fetch_error:
            raise self.fetch_error
        return list(self.products)

    async def checkout(self, request: CheckoutRequest, product: Product) -> bool:
        self.checkouts.append(request)
        if self.order_error:
            raise self.order_error
        return self.accept

    async def sell(self, request: CheckoutRequest, product: Product) -> bool:
        self.sales.append(request)
        if self.order_error:
            raise self.order_error
        return self.accept


def partner_product(provider: str, origin_id: int, name: str = "Partner item", **kwargs) -> Product:
    return Product(origin_id=origin_id, provider=provider, name=name, **kwargs)


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite database with a fresh schema per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db_session) -> ProductRepository:
    return ProductRepository(db_session)


@pytest.fixture
def internal_product(repository) -> Product:
    return repository.add(Product(
        name="Local mug",
        available_quantity=5,
        price=Decimal("12.50"),
        currency="EUR",
        created_by=7,
    ))


@pytest.fixture
def cde_product(repository) -> Product:
    return repository.add(partner_product(
        "cde",
        100,
        name="CDE lamp",
        available_quantity=40,
        price=Decimal("30.00"),
        currency="EUR",
        attributes=[ProductAttribute(key="color", value="red", provider="cde")],
        contents=[ProductContent(type="image", url="http://cde.test/lamp.png", provider="cde")],
    ))


def mock_client(handler) -> httpx.AsyncClient:
    """HTTP client whose requests are answered by `handler`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
