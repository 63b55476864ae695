from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from catalog_hub.core.exceptions import (
    AttributeNotFoundError,
    PersistenceError,
    ProductNotFoundError,
    ReadOnlyAttributeError,
)
from catalog_hub.core.logging import get_logger
from catalog_hub.domain.models.product import (
    INTERNAL_ORIGIN_ID,
    INTERNAL_PROVIDER,
    Product,
    ProductAttribute,
    ProductCategory,
    ProductContent,
)
from catalog_hub.infrastructure.database.models import (
    ProductAttributeEntity,
    ProductCategoryEntity,
    ProductContentEntity,
    ProductEntity,
    utcnow,
)

logger = get_logger(__name__)


def to_domain(entity: ProductEntity) -> Product:
    return Product(
        id=entity.id,
        origin_id=entity.origin_id,
        provider=entity.provider,
        name=entity.name,
        description=entity.description or "",
        available_quantity=entity.available_quantity,
        price=entity.price,
        currency=entity.currency,
        owner=entity.owner,
        created_by=entity.created_by,
        category_id=entity.category_id,
        attributes=[
            ProductAttribute(id=a.id, key=a.key, value=a.value, provider=a.provider)
            for a in entity.attributes
        ],
        contents=[
            ProductContent(
                id=c.id,
                type=c.type,
                url=c.url,
                description=c.description,
                provider=c.provider,
            )
            for c in entity.contents
        ],
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


def _attribute_entities(product: Product) -> List[ProductAttributeEntity]:
    return [
        ProductAttributeEntity(key=a.key, value=a.value, provider=a.provider)
        for a in product.attributes
    ]


def _content_entities(product: Product) -> List[ProductContentEntity]:
    return [
        ProductContentEntity(type=c.type, url=c.url, description=c.description, provider=c.provider)
        for c in product.contents
    ]


class ProductRepository:
    """
    Canonical product store.

    Authoritative for the stock of internal products. Every write commits
    its own transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def _select_products(self):
        return (
            select(ProductEntity)
            .options(selectinload(ProductEntity.attributes), selectinload(ProductEntity.contents))
            .execution_options(populate_existing=True)
        )

    def _load(self, product_id: int) -> Optional[ProductEntity]:
        return (
            self.session.execute(self._select_products().where(ProductEntity.id == product_id))
            .scalars()
            .first()
        )

    # ---------- READS ----------
    def get_by_id(self, product_id: int) -> Optional[Product]:
        try:
            entity = self._load(product_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                detail=f"Failed to read product {product_id}",
                context={"product_id": product_id},
                original_exception=e,
            )
        return to_domain(entity) if entity else None

    def is_internal(self, product_id: int) -> bool:
        """True iff the stored record is owned by the local store."""
        found = self.session.execute(
            select(ProductEntity.id)
            .where(ProductEntity.id == product_id)
            .where(ProductEntity.provider == INTERNAL_PROVIDER)
            .where(ProductEntity.origin_id == INTERNAL_ORIGIN_ID)
        ).scalar_one_or_none()
        return found is not None

    def find_by_origin(self, origin_id: int, provider: str) -> Optional[Product]:
        """Look up an external product by its partner-side identity."""
        try:
            entity = (
                self.session.execute(
                    self._select_products()
                    .where(ProductEntity.origin_id == origin_id)
                    .where(ProductEntity.provider == provider)
                )
                .scalars()
                .first()
            )
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                detail=f"Failed to look up product {origin_id} from {provider}",
                context={"origin_id": origin_id, "provider": provider},
                original_exception=e,
            )
        return to_domain(entity) if entity else None

    def list_all(self) -> List[Product]:
        entities = self.session.execute(self._select_products().order_by(ProductEntity.id)).scalars().all()
        return [to_domain(e) for e in entities]

    def list_internal(self) -> List[Product]:
        entities = self.session.execute(
            self._select_products()
            .where(ProductEntity.provider == INTERNAL_PROVIDER)
            .where(ProductEntity.origin_id == INTERNAL_ORIGIN_ID)
            .order_by(ProductEntity.id)
        ).scalars().all()
        return [to_domain(e) for e in entities]

    def list_by_category(self, category_id: int) -> List[Product]:
        entities = self.session.execute(
            self._select_products()
            .where(ProductEntity.category_id == category_id)
            .order_by(ProductEntity.id)
        ).scalars().all()
        return [to_domain(e) for e in entities]

    def list_by_owner(self, created_by: int) -> List[Product]:
        entities = self.session.execute(
            self._select_products()
            .where(ProductEntity.created_by == created_by)
            .order_by(ProductEntity.id)
        ).scalars().all()
        return [to_domain(e) for e in entities]

    def list_categories(self) -> List[ProductCategory]:
        entities = self.session.execute(
            select(ProductCategoryEntity).order_by(ProductCategoryEntity.id)
        ).scalars().all()
        return [ProductCategory(id=c.id, name=c.name, description=c.description) for c in entities]

    # ---------- WRITES ----------
    def try_decrement(self, product_id: int, quantity: int) -> bool:
        """
        Atomically take `quantity` units from an internal product.

        The stock is only decremented if it covers the quantity, in a single
        conditional UPDATE, so concurrent sales cannot oversell.

        Returns:
            True if a row was decremented, False if the product is unknown,
            external or short of stock.

        Raises:
            PersistenceError: If the write fails
        """
        try:
            result = self.session.execute(
                update(ProductEntity)
                .where(ProductEntity.id == product_id)
                .where(ProductEntity.provider == INTERNAL_PROVIDER)
                .where(ProductEntity.origin_id == INTERNAL_ORIGIN_ID)
                .where(ProductEntity.available_quantity >= quantity)
                .values(
                    available_quantity=ProductEntity.available_quantity - quantity,
                    updated_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Stock decrement failed for product {product_id}: {str(e)}")
            raise PersistenceError(
                detail=f"Failed to decrement stock for product {product_id}",
                context={"product_id": product_id, "quantity": quantity},
                original_exception=e,
            )
        return result.rowcount == 1

    def add(self, product: Product) -> Product:
        """
        Insert a product together with its attributes and contents.

        Raises:
            PersistenceError: If the write fails
        """
        now = utcnow()
        entity = ProductEntity(
            origin_id=product.origin_id,
            provider=product.provider,
            name=product.name,
            description=product.description or None,
            available_quantity=product.available_quantity,
            price=product.price,
            currency=product.currency,
            owner=product.owner,
            created_by=product.created_by,
            category_id=product.category_id,
            created_at=now,
            updated_at=now,
        )
        entity.attributes = _attribute_entities(product)
        entity.contents = _content_entities(product)

        try:
            self.session.add(entity)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                detail=f"Failed to insert product {product.name!r}",
                context={"origin_id": product.origin_id, "provider": product.provider},
                original_exception=e,
            )
        return to_domain(self._load(entity.id))

    def update_from(self, existing: Product, incoming: Product) -> Product:
        """
        Overwrite a stored product with a freshly fetched partner copy.

        Descriptive fields, quantity and owner are overwritten. Every
        attribute and content carrying a provider tag is replaced by the
        incoming set; untagged (locally added) children are kept.

        Raises:
            ProductNotFoundError: If the product does not exist
            PersistenceError: If the write fails
        """
        product_id = existing.id
        entity = self._load(product_id)
        if entity is None:
            raise ProductNotFoundError(product_id)

        entity.name = incoming.name
        entity.description = incoming.description or None
        entity.price = incoming.price
        entity.currency = incoming.currency
        entity.available_quantity = incoming.available_quantity
        entity.owner = incoming.owner
        entity.updated_at = utcnow()

        entity.attributes = [a for a in entity.attributes if not a.provider] + _attribute_entities(incoming)
        entity.contents = [c for c in entity.contents if not c.provider] + _content_entities(incoming)

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                detail=f"Failed to update product {product_id}",
                context={"product_id": product_id},
                original_exception=e,
            )
        return to_domain(self._load(product_id))

    def delete_internal(self, product_id: int) -> bool:
        """
        Delete a product created through the internal system.

        Returns:
            True if deleted, False if no internal product has that id
        """
        entity = self.session.execute(
            select(ProductEntity)
            .where(ProductEntity.id == product_id)
            .where(ProductEntity.provider == INTERNAL_PROVIDER)
            .where(ProductEntity.origin_id == INTERNAL_ORIGIN_ID)
        ).scalar_one_or_none()
        if entity is None:
            return False

        try:
            self.session.delete(entity)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                detail=f"Failed to delete product {product_id}",
                context={"product_id": product_id},
                original_exception=e,
            )
        return True

    # ---------- ATTRIBUTES ----------
    def _require(self, product_id: int) -> ProductEntity:
        entity = self._load(product_id)
        if entity is None:
            raise ProductNotFoundError(product_id)
        return entity

    def _local_attribute(self, product_id: int, attribute_id: int) -> ProductAttributeEntity:
        attribute = self.session.execute(
            select(ProductAttributeEntity)
            .where(ProductAttributeEntity.id == attribute_id)
            .where(ProductAttributeEntity.product_id == product_id)
        ).scalar_one_or_none()
        if attribute is None:
            raise AttributeNotFoundError(product_id, attribute_id)
        if attribute.provider:
            raise ReadOnlyAttributeError(attribute_id, attribute.provider)
        return attribute

    def _commit_attributes(self, product_id: int, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                detail=f"Failed to {action} attributes of product {product_id}",
                context={"product_id": product_id},
                original_exception=e,
            )

    def list_attributes(self, product_id: int) -> List[ProductAttribute]:
        """
        Raises:
            ProductNotFoundError: If the product does not exist
        """
        return to_domain(self._require(product_id)).attributes

    def add_attributes(self, product_id: int, attributes: List[ProductAttribute]) -> List[ProductAttribute]:
        """
        Attach locally managed attributes to a product.

        New attributes are always stored untagged, so reconciliation keeps
        them when it replaces the partner's set.

        Returns:
            Every attribute of the product after the insert
        """
        entity = self._require(product_id)
        entity.attributes.extend(
            ProductAttributeEntity(key=a.key, value=a.value, provider=INTERNAL_PROVIDER)
            for a in attributes
        )
        entity.updated_at = utcnow()
        self._commit_attributes(product_id, "add")
        logger.info(f"Added {len(attributes)} attributes to product {product_id}")
        return to_domain(self._load(product_id)).attributes

    def update_attribute(self, product_id: int, attribute_id: int, key: str, value: str) -> ProductAttribute:
        """
        Raises:
            AttributeNotFoundError: If the product has no such attribute
            ReadOnlyAttributeError: If the attribute is partner-owned
        """
        attribute = self._local_attribute(product_id, attribute_id)
        attribute.key = key
        attribute.value = value
        self._commit_attributes(product_id, "update")
        return ProductAttribute(id=attribute.id, key=attribute.key, value=attribute.value)

    def delete_attribute(self, product_id: int, attribute_id: int) -> None:
        """
        Raises:
            AttributeNotFoundError: If the product has no such attribute
            ReadOnlyAttributeError: If the attribute is partner-owned
        """
        attribute = self._local_attribute(product_id, attribute_id)
        self.session.delete(attribute)
        self._commit_attributes(product_id, "delete")
        logger.info(f"Deleted attribute {attribute_id} of product {product_id}")
