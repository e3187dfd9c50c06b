"""
Order router - /api/orders/*
CLEAN-ARCH: Thin router delegating to OrderService.

/kitchen/active and /my-orders are declared before /{order_id}.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import (
    Pagination,
    current_user,
    get_pagination_large,
    ok,
    require_admin,
)
from rest_api.services.domain import OrderService
from shared.infrastructure.db import get_db
from shared.utils.shop_schemas import OrderCancelRequest, OrderCreateRequest, OrderStatusUpdate


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/kitchen/active")
def kitchen_orders(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    """Confirmed, preparing and ready orders, oldest first."""
    orders = OrderService(db).kitchen_queue()
    return ok(orders, count=len(orders))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    body: OrderCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """Checkout of the user's active cart."""
    order = OrderService(db).checkout(user, body)
    return ok(order, message="Pedido creado exitosamente")


@router.get("/my-orders")
def my_orders(
    status: str | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    orders = OrderService(db).my_orders(user, status=status, limit=limit)
    return ok(orders, count=len(orders))


@router.get("")
def list_orders(
    status: str | None = None,
    delivery_type: str | None = Query(default=None, alias="deliveryType"),
    pagination: Pagination = Depends(get_pagination_large),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    orders, total = OrderService(db).list_all(
        status=status,
        delivery_type=delivery_type,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return ok(orders, count=len(orders), pagination=pagination.to_dict(total))


@router.get("/{order_id}")
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    return ok(OrderService(db).get_for_user(order_id, user))


@router.put("/{order_id}/status")
def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    order = OrderService(db).update_status(order_id, body, admin)
    return ok(order, message="Estado del pedido actualizado")


@router.delete("/{order_id}")
def cancel_order(
    order_id: int,
    body: OrderCancelRequest | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    reason = body.reason if body else None
    order = OrderService(db).cancel(order_id, user, reason)
    return ok(order, message="Pedido cancelado exitosamente")
