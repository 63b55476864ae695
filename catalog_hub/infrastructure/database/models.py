from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ProductCategoryEntity(Base):
    __tablename__ = "product_categories"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)


class ProductEntity(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    origin_id: Mapped[int] = mapped_column(Integer, default=-1, nullable=False)
    provider: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    available_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), default="", nullable=False)
    owner: Mapped[str | None] = mapped_column(String(200))
    created_by: Mapped[int | None] = mapped_column(Integer)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("product_categories.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    attributes: Mapped[List[ProductAttributeEntity]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductAttributeEntity.id",
    )
    contents: Mapped[List[ProductContentEntity]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductContentEntity.id",
    )

    __table_args__ = (
        CheckConstraint("available_quantity >= 0", name="ck_products_available_quantity_nonneg"),
        # (origin_id, provider) identifies an external product; internal rows all share (-1, '')
        Index(
            "uq_products_origin_provider",
            "origin_id",
            "provider",
            unique=True,
            sqlite_where=text("provider <> ''"),
            postgresql_where=text("provider <> ''"),
        ),
    )


class ProductAttributeEntity(Base):
    __tablename__ = "product_attributes"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    key: Mapped[str] = mapped_column(String(200), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    provider: Mapped[str] = mapped_column(String(64), default="", nullable=False)

    product: Mapped[ProductEntity] = relationship(back_populates="attributes")


class ProductContentEntity(Base):
    __tablename__ = "product_contents"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    provider: Mapped[str] = mapped_column(String(64), default="", nullable=False)

    product: Mapped[ProductEntity] = relationship(back_populates="contents")
