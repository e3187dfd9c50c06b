"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus, PaymentStatus

from .base import AuditMixin, Base, EmailColumn, UTCDateTime

if TYPE_CHECKING:
    from .user import User


class Order(AuditMixin, Base):
    """
    Checked-out cart.

    Items, customer data and totals are snapshots taken at checkout; later
    changes to products or the user do not alter an order.
    """

    __tablename__ = "app_order"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[Optional[str]] = mapped_column(String(20), unique=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id"), nullable=False, index=True
    )
    session_id: Mapped[Optional[str]] = mapped_column(String(100))

    # Customer snapshot
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[str] = mapped_column(EmailColumn, nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(30))

    # Totals
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subtotal_before_discount: Mapped[Optional[float]] = mapped_column(Float)
    coupon_code: Mapped[Optional[str]] = mapped_column(String(20))
    coupon_discount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    iva_rate: Mapped[float] = mapped_column(Float, nullable=False)
    iva_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=OrderStatus.PENDING)
    delivery_type: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING
    )
    customer_notes: Mapped[Optional[str]] = mapped_column(String(1000))
    staff_notes: Mapped[Optional[str]] = mapped_column(String(1000))
    estimated_ready_time: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text)

    user: Mapped["User"] = relationship()
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        CheckConstraint("subtotal >= 0", name="chk_order_subtotal_non_negative"),
        CheckConstraint("coupon_discount >= 0", name="chk_order_discount_non_negative"),
        Index("ix_order_user_created", "user_id", "created_at"),
        Index("ix_order_status_created", "status", "created_at"),
    )

    @staticmethod
    def format_number(sequence: int) -> str:
        return f"ORD-{sequence:06d}"


class OrderItem(Base):
    """Snapshot of a cart line at checkout."""

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(Integer, ForeignKey("product.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    customizations: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="chk_order_item_quantity_positive"),
        CheckConstraint("price >= 0", name="chk_order_item_price_non_negative"),
    )
