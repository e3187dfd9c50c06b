"""
Coupon Service - discount codes, validation at checkout and usage history.

Usage:
    from rest_api.services.domain import CouponService

    service = CouponService(db)
    result = service.validate_for_user("VERANO10", 50.0, user)
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, joinedload

from rest_api.models import Coupon, CouponUsage, User, utcnow
from rest_api.repositories import RepositoryFilters
from rest_api.services.base_service import BaseCRUDService
from shared.config.constants import DiscountType
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.shop_schemas import CouponOutput, CouponUsageOutput
from shared.utils.validators import normalize_coupon_code, parse_iso_date

logger = get_logger(__name__)


class CouponService(BaseCRUDService[Coupon, CouponOutput]):
    """
    Service for coupons.

    Business rules:
    - Codes are uppercase and unique
    - percentage <= 100; end_date >= start_date (also after partial updates)
    - A user may redeem a coupon at most usage_per_user times
    - usage_count never exceeds usage_limit
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Coupon,
            output_schema=CouponOutput,
            entity_name="Cupón",
            supports_soft_delete=False,
        )

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_coupons(self, *, active: bool | None = None) -> list[CouponOutput]:
        coupons = self._repo.find_all(
            RepositoryFilters(include_deleted=True),
            order_by=Coupon.created_at.desc(),
        )
        if active is not None:
            coupons = [c for c in coupons if c.is_active == active]
        return [self.to_output(c) for c in coupons]

    def get_coupon(self, coupon_id: int) -> CouponOutput:
        return self.get_by_id(coupon_id, include_inactive=True)

    def find_by_code(self, code: str) -> Coupon | None:
        return self._db.scalar(select(Coupon).where(Coupon.code == normalize_coupon_code(code)))

    def user_usage_count(self, coupon_id: int, user_id: int) -> int:
        return self._db.scalar(
            select(func.count(CouponUsage.id)).where(
                CouponUsage.coupon_id == coupon_id,
                CouponUsage.user_id == user_id,
            )
        ) or 0

    def usage_report(
        self,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int = 100,
    ) -> dict[str, Any]:
        """Usage history across coupons with totals for the date range."""
        conditions = []
        if start_date:
            conditions.append(CouponUsage.used_at >= self._day_start(start_date))
        if end_date:
            conditions.append(CouponUsage.used_at < self._day_start(end_date) + timedelta(days=1))

        usages = self._db.execute(
            select(CouponUsage)
            .options(joinedload(CouponUsage.user))
            .where(*conditions)
            .order_by(CouponUsage.used_at.desc())
            .limit(limit)
        ).scalars().all()

        total_uses, total_discount, total_value = self._db.execute(
            select(
                func.count(CouponUsage.id),
                func.coalesce(func.sum(CouponUsage.discount_applied), 0.0),
                func.coalesce(func.sum(CouponUsage.order_subtotal), 0.0),
            ).where(*conditions)
        ).one()

        return {
            "usages": [CouponUsageOutput.model_validate(u) for u in usages],
            "totals": {
                "totalUses": total_uses,
                "totalDiscountGiven": round(float(total_discount), 2),
                "totalOrderValue": round(float(total_value), 2),
            },
        }

    def coupon_usage(self, coupon_id: int) -> dict[str, Any]:
        """Usage history and stats of one coupon."""
        coupon = self.get_entity(coupon_id, include_inactive=True)
        usages = self._db.execute(
            select(CouponUsage)
            .options(joinedload(CouponUsage.user))
            .where(CouponUsage.coupon_id == coupon.id)
            .order_by(CouponUsage.used_at.desc())
        ).scalars().all()

        total_discount = round(sum(u.discount_applied for u in usages), 2)
        return {
            "coupon": {"id": coupon.id, "code": coupon.code, "description": coupon.description},
            "stats": {
                "totalUses": len(usages),
                "totalDiscountGiven": total_discount,
                "averageDiscount": round(total_discount / len(usages), 2) if usages else 0,
                "totalOrderValue": round(sum(u.order_subtotal for u in usages), 2),
            },
            "usages": [CouponUsageOutput.model_validate(u) for u in usages],
        }

    # =========================================================================
    # Checkout
    # =========================================================================

    def check_for_user(self, code: str, subtotal: float, user: User) -> tuple[Coupon, float]:
        """
        Resolve a code for a user and subtotal.

        Returns:
            The coupon and the discount it grants.

        Raises:
            NotFoundError: Unknown code.
            ValidationError: Inactive, outside its dates, exhausted, below the
                minimum purchase, or already used by this user.
        """
        coupon = self.find_by_code(code)
        if coupon is None:
            raise NotFoundError("Cupón")

        valid, message = coupon.can_be_used(subtotal)
        if not valid:
            raise ValidationError(message, coupon_id=coupon.id)

        if self.user_usage_count(coupon.id, user.id) >= coupon.usage_per_user:
            raise ValidationError(
                "Ya has usado este cupón el máximo de veces permitido",
                coupon_id=coupon.id,
            )

        return coupon, coupon.calculate_discount(subtotal)

    def validate_for_user(self, code: str, cart_total: float, user: User) -> dict[str, Any]:
        coupon, discount = self.check_for_user(code, cart_total, user)
        return {
            "code": coupon.code,
            "description": coupon.description,
            "discountType": coupon.discount_type,
            "discountValue": coupon.discount_value,
            "discount": discount,
            "originalTotal": round(cart_total, 2),
            "finalTotal": round(max(cart_total - discount, 0), 2),
        }

    def record_usage(
        self,
        coupon: Coupon,
        user: User,
        order_number: str,
        discount: float,
        subtotal: float,
    ) -> None:
        """
        Count one redemption; the caller commits with the order.

        Raises:
            ValidationError: The usage limit was reached concurrently.
        """
        query = update(Coupon).where(Coupon.id == coupon.id)
        if coupon.usage_limit is not None:
            query = query.where(Coupon.usage_count < coupon.usage_limit)
        result = self._db.execute(query.values(usage_count=Coupon.usage_count + 1))
        if result.rowcount != 1:
            raise ValidationError("Este cupón ha alcanzado su límite de uso", coupon_id=coupon.id)

        self._db.add(
            CouponUsage(
                coupon_id=coupon.id,
                coupon_code=coupon.code,
                user_id=user.id,
                order_number=order_number,
                discount_type=coupon.discount_type,
                discount_value=coupon.discount_value,
                discount_applied=discount,
                order_subtotal=subtotal,
                used_at=utcnow(),
            )
        )

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        if self.find_by_code(data["code"]):
            raise ValidationError("Ya existe un cupón con este código")

    def _validate_update(self, entity: Coupon, data: dict[str, Any]) -> None:
        code = data.get("code")
        if code and code != entity.code and self.find_by_code(code):
            raise ValidationError("Ya existe un cupón con este código")

        discount_type = data.get("discount_type", entity.discount_type)
        discount_value = data.get("discount_value", entity.discount_value)
        if discount_type == DiscountType.PERCENTAGE and discount_value > 100:
            raise ValidationError("El descuento porcentual no puede exceder 100%")

        start_date = data.get("start_date", entity.start_date)
        end_date = data.get("end_date", entity.end_date)
        if end_date < start_date:
            raise ValidationError("La fecha de fin debe ser posterior o igual a la fecha de inicio")

    def _validate_delete(self, entity: Coupon) -> None:
        # Usage rows reference the coupon
        self._db.execute(delete(CouponUsage).where(CouponUsage.coupon_id == entity.id))

    @staticmethod
    def _day_start(value: str) -> datetime:
        try:
            day = parse_iso_date(value)
        except ValueError as e:
            raise ValidationError(str(e))
        return datetime.combine(day, time.min, tzinfo=timezone.utc)
