"""
Coupon Models: Coupon, CouponUsage.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import CouponScope, DiscountType

from .base import AuditMixin, Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from .user import User


class Coupon(AuditMixin, Base):
    """
    Discount code applied at checkout.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id from AuditMixin.
    """

    __tablename__ = "coupon"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[float] = mapped_column(Float, nullable=False)
    min_purchase: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_discount: Mapped[Optional[float]] = mapped_column(Float)
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    usage_limit: Mapped[Optional[int]] = mapped_column(Integer)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    usage_per_user: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    applicable_to: Mapped[str] = mapped_column(String(20), nullable=False, default=CouponScope.ALL_ITEMS)
    applicable_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    __table_args__ = (
        CheckConstraint("discount_value > 0", name="chk_coupon_discount_positive"),
        CheckConstraint("min_purchase >= 0", name="chk_coupon_min_purchase"),
        CheckConstraint("end_date >= start_date", name="chk_coupon_date_range"),
        Index("ix_coupon_active_dates", "is_active", "start_date", "end_date"),
    )

    @property
    def is_currently_valid(self) -> bool:
        now = utcnow()
        return (
            self.is_active
            and self.start_date <= now <= self.end_date
            and (self.usage_limit is None or self.usage_count < self.usage_limit)
        )

    def calculate_discount(self, subtotal: float) -> float:
        """
        Discount for a subtotal: percentages are capped by max_discount,
        fixed amounts never exceed the subtotal.
        """
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = subtotal * self.discount_value / 100
            if self.max_discount is not None and discount > self.max_discount:
                discount = self.max_discount
        else:
            discount = min(self.discount_value, subtotal)
        return round(discount, 2)

    def can_be_used(self, subtotal: float) -> tuple[bool, str]:
        """Return (valid, message) for applying this coupon to a subtotal."""
        now = utcnow()
        if not self.is_active:
            return False, "Este cupón no está activo"
        if now < self.start_date:
            return False, "Este cupón aún no está vigente"
        if now > self.end_date:
            return False, "Este cupón ha expirado"
        if self.usage_limit is not None and self.usage_count >= self.usage_limit:
            return False, "Este cupón ha alcanzado su límite de uso"
        if subtotal < self.min_purchase:
            return False, f"El pedido mínimo para este cupón es ${self.min_purchase:.2f}"
        return True, "Cupón válido"


class CouponUsage(Base):
    """One redemption of a coupon on an order."""

    __tablename__ = "coupon_usage"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    coupon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("coupon.id", ondelete="CASCADE"), nullable=False
    )
    coupon_code: Mapped[str] = mapped_column(String(20), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("app_user.id"), nullable=False)
    order_number: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[float] = mapped_column(Float, nullable=False)
    discount_applied: Mapped[float] = mapped_column(Float, nullable=False)
    order_subtotal: Mapped[float] = mapped_column(Float, nullable=False)
    used_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    user: Mapped["User"] = relationship()

    __table_args__ = (
        Index("ix_coupon_usage_coupon_user", "coupon_id", "user_id"),
        Index("ix_coupon_usage_user_used", "user_id", "used_at"),
        Index("ix_coupon_usage_used_at", "used_at"),
    )
