"""
Order Service - checkout and order lifecycle.

Checkout turns the user's active cart into an order snapshot. Stock was
already taken when products entered the cart, so checkout only re-checks
availability; cancelling an order gives the stock back.

Usage:
    from rest_api.services.domain import OrderService

    service = OrderService(db)
    order = service.checkout(user, body)
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.orm import Session

from rest_api.models import Coupon, Order, OrderItem, User, utcnow
from rest_api.repositories import CartRepository, OrderFilters, OrderRepository, ProductRepository
from rest_api.services.base_service import BaseService
from rest_api.services.domain.coupon_service import CouponService
from shared.config.constants import CartStatus, OrderStatus, PaymentStatus
from shared.config.logging import order_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import ForbiddenError, NotFoundError, ValidationError
from shared.utils.shop_schemas import OrderCreateRequest, OrderOutput, OrderStatusUpdate


class OrderService(BaseService[Order]):
    """
    Service for orders.

    Business rules:
    - Checkout needs a non-empty active cart of the user (or of the given session)
    - subtotal = items - coupon discount (never negative); IVA applies after the discount
    - Delivered and cancelled orders are final
    - Customers cancel only pending or confirmed orders; stock is restored
    """

    def __init__(self, db: Session):
        super().__init__(db, Order, OrderRepository(db))
        self._products = ProductRepository(db)
        self._carts = CartRepository(db)
        self._coupons = CouponService(db)

    @property
    def orders(self) -> OrderRepository:
        return self._repo

    # =========================================================================
    # Checkout
    # =========================================================================

    def checkout(self, user: User, body: OrderCreateRequest) -> OrderOutput:
        """
        Create an order from the active cart.

        Raises:
            ValidationError: Empty cart, unavailable product or invalid coupon.
            NotFoundError: A product no longer exists or the coupon is unknown.
        """
        cart = self._carts.find_active_for_checkout(user.id, body.session_id)
        if cart is None or not cart.items:
            raise ValidationError("El carrito está vacío. Agrega productos antes de pagar")

        if cart.user_id is None:
            cart.user_id = user.id

        for item in cart.items:
            product = self._products.find_by_id(item.product_id)
            if product is None:
                raise NotFoundError(f"Producto {item.name}")
            if not product.available:
                raise ValidationError(f"El producto {item.name} ya no está disponible")

        items_subtotal = round(sum(item.subtotal for item in cart.items), 2)

        coupon: Coupon | None = None
        discount = 0.0
        if body.coupon_code:
            coupon, discount = self._coupons.check_for_user(body.coupon_code, items_subtotal, user)

        subtotal = round(max(items_subtotal - discount, 0), 2)
        iva_rate = cart.iva_rate
        iva_amount = round(subtotal * iva_rate, 2)

        order = Order(
            user_id=user.id,
            session_id=cart.session_id,
            customer_name=user.full_name,
            customer_email=user.email,
            customer_phone=user.phone,
            total_items=cart.total_items,
            subtotal_before_discount=items_subtotal if coupon else None,
            coupon_code=coupon.code if coupon else None,
            coupon_discount=discount,
            subtotal=subtotal,
            iva_rate=iva_rate,
            iva_amount=iva_amount,
            total_price=round(subtotal + iva_amount, 2),
            delivery_type=body.delivery_type,
            payment_method=body.payment_method,
            customer_notes=body.customer_notes or "",
            estimated_ready_time=utcnow() + timedelta(minutes=settings.order_preparation_minutes),
            items=[
                OrderItem(
                    product_id=item.product_id,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    customizations=dict(item.customizations or {}),
                    subtotal=item.subtotal,
                )
                for item in cart.items
            ],
        )
        order.set_created_by(user.id)
        self._db.add(order)
        # The number derives from the primary key
        self._db.flush()
        order.order_number = Order.format_number(order.id)

        if coupon is not None:
            self._coupons.record_usage(coupon, user, order.order_number, discount, items_subtotal)

        cart.status = CartStatus.COMPLETED
        cart.updated_at = utcnow()
        self._commit("crear pedido", order)

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            user_id=user.id,
            total=order.total_price,
            coupon=order.coupon_code,
        )
        return self.to_output(order)

    # =========================================================================
    # Queries
    # =========================================================================

    def my_orders(self, user: User, *, status: str | None = None, limit: int = 20) -> list[OrderOutput]:
        filters = OrderFilters(user_id=user.id, status=status, limit=limit, include_deleted=True)
        orders = self.orders.find_all(filters, order_by=[Order.created_at.desc(), Order.id.desc()])
        return [self.to_output(o) for o in orders]

    def get_for_user(self, order_id: int, user: User) -> OrderOutput:
        """Raises ForbiddenError unless the user owns the order or is an admin."""
        order = self.get_entity(order_id)
        if order.user_id != user.id and not user.is_admin:
            raise ForbiddenError("ver este pedido", order_id=order_id, user_id=user.id)
        return self.to_output(order)

    def list_all(
        self,
        *,
        status: str | None = None,
        delivery_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[OrderOutput], int]:
        """A page of orders, newest first, with the total count."""
        filters = OrderFilters(
            status=status,
            delivery_type=delivery_type,
            limit=limit,
            offset=offset,
            include_deleted=True,
        )
        orders = self.orders.find_all(filters, order_by=[Order.created_at.desc(), Order.id.desc()])
        return [self.to_output(o) for o in orders], self.orders.count(filters)

    def kitchen_queue(self) -> list[OrderOutput]:
        return [self.to_output(o) for o in self.orders.kitchen_queue()]

    # =========================================================================
    # Status changes
    # =========================================================================

    def update_status(self, order_id: int, body: OrderStatusUpdate, admin: User) -> OrderOutput:
        """
        Move an order to a new status.

        Delivered orders are marked paid; moving to cancelled restores stock.

        Raises:
            ValidationError: The order is already delivered or cancelled.
        """
        order = self.get_entity(order_id)
        if order.status in OrderStatus.FINAL:
            raise ValidationError(f"No se puede cambiar el estado de un pedido {order.status}")

        if body.staff_notes:
            order.staff_notes = body.staff_notes

        if body.status == OrderStatus.CANCELLED:
            self._cancel(order, "Cancelado por el administrador")
        else:
            order.status = body.status
            if body.status == OrderStatus.DELIVERED:
                order.completed_at = utcnow()
                order.payment_status = PaymentStatus.PAID

        order.set_updated_by(admin.id)
        self._commit("actualizar estado del pedido", order)

        logger.info("Order status updated", order_id=order.id, status=order.status, user_id=admin.id)
        return self.to_output(order)

    def cancel(self, order_id: int, user: User, reason: str | None = None) -> OrderOutput:
        """
        Cancel an order and return its items to stock.

        Raises:
            ForbiddenError: Not the owner nor an admin.
            ValidationError: The kitchen already started with the order, or it is final.
        """
        order = self.get_entity(order_id)
        if order.user_id != user.id and not user.is_admin:
            raise ForbiddenError("cancelar este pedido", order_id=order_id, user_id=user.id)
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("El pedido ya está cancelado")
        if order.status not in OrderStatus.CANCELLABLE:
            raise ValidationError(f"No se puede cancelar un pedido en estado {order.status}")

        default_reason = (
            "Cancelado por el administrador" if user.is_admin else "Cancelado por el cliente"
        )
        self._cancel(order, reason or default_reason)
        order.set_updated_by(user.id)
        self._commit("cancelar pedido", order)

        logger.info("Order cancelled", order_id=order.id, user_id=user.id)
        return self.to_output(order)

    # =========================================================================
    # Helpers
    # =========================================================================

    def get_entity(self, order_id: int) -> Order:
        order = self.orders.find_by_id(order_id, include_deleted=True)
        if order is None:
            raise NotFoundError("Pedido", order_id)
        return order

    def to_output(self, order: Order) -> OrderOutput:
        return OrderOutput.model_validate(order)

    def _cancel(self, order: Order, reason: str) -> None:
        for item in order.items:
            self._products.release_stock(item.product_id, item.quantity)
        order.status = OrderStatus.CANCELLED
        order.cancelled_at = utcnow()
        order.cancellation_reason = reason
        if order.payment_status == PaymentStatus.PAID:
            order.payment_status = PaymentStatus.REFUNDED

