"""
Cart Models: Cart, CartItem.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, JSON, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import CartStatus
from shared.config.settings import settings

from .base import AuditMixin, Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from .catalog import Product


def _default_expiration() -> datetime:
    return utcnow() + timedelta(days=settings.cart_expiration_days)


class Cart(AuditMixin, Base):
    """
    Shopping cart keyed by a client-generated session id.

    At most one active cart exists per session id. Totals are derived from
    the items: IVA is applied on the subtotal and rounded to 2 decimals.
    """

    __tablename__ = "cart"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("app_user.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=CartStatus.ACTIVE)
    iva_rate: Mapped[float] = mapped_column(Float, nullable=False, default=lambda: settings.iva_rate)
    expires_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=_default_expiration, index=True
    )

    items: Mapped[list["CartItem"]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    __table_args__ = (
        Index("ix_cart_user_status", "user_id", "status"),
        Index(
            "uq_cart_active_session",
            "session_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> float:
        return round(sum(item.subtotal for item in self.items), 2)

    @property
    def iva_amount(self) -> float:
        return round(self.subtotal * self.iva_rate, 2)

    @property
    def total_price(self) -> float:
        return round(self.subtotal + self.iva_amount, 2)


class CartItem(Base):
    """
    Cart line: a product with its name and price captured when it was added.

    customizations: {"removedIngredients": [...], "addedIngredients": [...],
    "allergyWarnings": [...], "specialInstructions": str}
    """

    __tablename__ = "cart_item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cart_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cart.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(Integer, ForeignKey("product.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    customizations: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    cart: Mapped["Cart"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship()

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="chk_cart_item_quantity_positive"),
    )

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)
