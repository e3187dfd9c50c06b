"""
Catalog Models: Category, Product.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Float, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base


class Category(AuditMixin, Base):
    """
    Menu category.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id from AuditMixin.

    Products reference categories by name (Product.category), so the name is
    unique case-insensitively and renaming is checked against the slug too.
    """

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(60), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(200))
    icon: Mapped[str] = mapped_column(String(20), nullable=False, default="🍽️")
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_category_order_active", "display_order", "is_active"),
    )


class Product(AuditMixin, Base):
    """
    Menu product.

    current_stock is decremented when the product is put in a cart and
    restored when it leaves the cart or an order is cancelled.
    """

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    ingredients: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    current_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_product_price_non_negative"),
        CheckConstraint("current_stock >= 0", name="chk_product_stock_non_negative"),
        Index("ix_product_category_available", "category", "available"),
    )
