"""
Coupon router - /coupons/*
CLEAN-ARCH: Thin router delegating to CouponService.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import current_user, ok, require_admin
from rest_api.services.domain import CouponService
from shared.infrastructure.db import get_db
from shared.utils.shop_schemas import CouponCreate, CouponUpdate, CouponValidateRequest


router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/validate")
def validate_coupon(
    body: CouponValidateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """Check a code against the cart total without redeeming it."""
    result = CouponService(db).validate_for_user(body.code, body.cart_total, user)
    return ok(result, message="Cupón válido")


@router.get("")
def list_coupons(
    active: bool | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    coupons = CouponService(db).list_coupons(active=active)
    return ok(coupons, count=len(coupons))


@router.get("/usage")
def coupons_usage(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    report = CouponService(db).usage_report(start_date=start_date, end_date=end_date, limit=limit)
    return ok(report)


@router.get("/{coupon_id}")
def get_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(CouponService(db).get_coupon(coupon_id))


@router.get("/{coupon_id}/usage")
def coupon_usage(
    coupon_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(CouponService(db).coupon_usage(coupon_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_coupon(
    body: CouponCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    coupon = CouponService(db).create(body.model_dump(), admin.id)
    return ok(coupon, message="Cupón creado exitosamente")


@router.put("/{coupon_id}")
def update_coupon(
    coupon_id: int,
    body: CouponUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    # max_discount and usage_limit may be cleared
    changes = {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in ("max_discount", "usage_limit")
    }
    coupon = CouponService(db).update(coupon_id, changes, admin.id)
    return ok(coupon, message="Cupón actualizado exitosamente")


@router.patch("/{coupon_id}/toggle")
def toggle_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    coupon = CouponService(db).toggle_active(coupon_id, admin.id)
    state = "activado" if coupon.is_active else "desactivado"
    return ok(coupon, message=f"Cupón {state} exitosamente")


@router.delete("/{coupon_id}")
def delete_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    CouponService(db).delete(coupon_id, admin.id)
    return ok(message="Cupón eliminado exitosamente")
