"""
Cart Service - session carts and stock reservation.

Putting a product in a cart takes it out of stock; removing it gives the
stock back. Every stock change and the cart change that causes it are
committed together, and stock is only taken through a conditional UPDATE
so concurrent requests cannot oversell.

Usage:
    from rest_api.services.domain import CartService

    service = CartService(db)
    cart = service.add_item(body, user)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Cart, CartItem, Product, User, utcnow
from rest_api.repositories import CartRepository, ProductRepository
from rest_api.services.base_service import BaseService
from shared.config.constants import CartStatus
from shared.config.logging import order_logger as logger
from shared.utils.exceptions import InsufficientStockError, NotFoundError, ValidationError
from shared.utils.shop_schemas import (
    CartAddRequest,
    CartCustomizations,
    CartItemTarget,
    CartOutput,
    CartUpdateRequest,
)


class CartService(BaseService[Cart]):
    """Service for shopping carts."""

    def __init__(self, db: Session):
        super().__init__(db, Cart, CartRepository(db))
        self._products = ProductRepository(db)

    @property
    def carts(self) -> CartRepository:
        return self._repo

    # =========================================================================
    # Queries
    # =========================================================================

    def get_or_create(self, session_id: str, user: User | None = None) -> CartOutput:
        """Active cart of a session, created on first use; links the user when known."""
        cart = self._active_cart(session_id)
        if cart is None:
            cart = Cart(session_id=session_id, user_id=user.id if user else None)
            self._db.add(cart)
            self._commit("crear carrito", cart)
            logger.info("Cart created", cart_id=cart.id, user_id=cart.user_id)
        elif user is not None and cart.user_id is None:
            cart.user_id = user.id
            self._commit("vincular carrito", cart)
        return self.to_output(cart)

    def require_active(self, session_id: str | None) -> Cart:
        """
        Raises:
            ValidationError: Missing session id.
            NotFoundError: No active cart for the session.
        """
        if not session_id:
            raise ValidationError("Se requiere el ID de sesión")
        cart = self._active_cart(session_id)
        if cart is None:
            raise NotFoundError("Carrito")
        return cart

    # =========================================================================
    # Commands
    # =========================================================================

    def add_item(self, body: CartAddRequest, user: User | None = None) -> CartOutput:
        """
        Add a product; a line with identical customizations is merged.

        Raises:
            NotFoundError: Unknown product.
            ValidationError: Product unavailable or not enough stock.
        """
        product = self._products.find_by_id(body.product_id)
        if product is None:
            raise NotFoundError("Producto", body.product_id)
        if not product.available:
            raise ValidationError("El producto no está disponible")

        cart = self._active_cart(body.session_id)
        if cart is None:
            cart = Cart(session_id=body.session_id, user_id=user.id if user else None)
            self._db.add(cart)
        elif user is not None and cart.user_id is None:
            cart.user_id = user.id

        self._take_stock(product, body.quantity)

        customizations = self._normalize_customizations(body.customizations)
        line = next(
            (
                item for item in cart.items
                if item.product_id == product.id and (item.customizations or {}) == customizations
            ),
            None,
        )
        if line is not None:
            line.quantity += body.quantity
        else:
            cart.items.append(
                CartItem(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    quantity=body.quantity,
                    customizations=customizations,
                )
            )

        cart.updated_at = utcnow()
        self._commit("agregar producto al carrito", cart)

        logger.info(
            "Cart item added",
            cart_id=cart.id,
            product_id=product.id,
            quantity=body.quantity,
        )
        return self.to_output(cart)

    def update_item(self, body: CartUpdateRequest) -> CartOutput:
        """
        Set a line's quantity; 0 removes the line.

        Raises:
            ValidationError: Negative quantity, unavailable product or not enough stock.
            NotFoundError: Missing cart or line.
        """
        if body.quantity < 0:
            raise ValidationError("La cantidad no puede ser negativa")

        cart = self.require_active(body.session_id)
        item = self._require_item(cart, body)

        if body.quantity == 0:
            self._products.release_stock(item.product_id, item.quantity)
            cart.items.remove(item)
        else:
            difference = body.quantity - item.quantity
            if difference > 0:
                product = self._products.find_by_id(item.product_id)
                if product is None:
                    raise NotFoundError("Producto", item.product_id)
                if not product.available:
                    raise ValidationError("El producto ya no está disponible")
                self._take_stock(product, difference)
            elif difference < 0:
                self._products.release_stock(item.product_id, -difference)
            item.quantity = body.quantity

        cart.updated_at = utcnow()
        self._commit("actualizar carrito", cart)

        logger.info("Cart item updated", cart_id=cart.id, product_id=item.product_id, quantity=body.quantity)
        return self.to_output(cart)

    def remove_item(self, body: CartItemTarget) -> CartOutput:
        cart = self.require_active(body.session_id)
        item = self._require_item(cart, body)

        self._products.release_stock(item.product_id, item.quantity)
        cart.items.remove(item)
        cart.updated_at = utcnow()
        self._commit("eliminar producto del carrito", cart)

        logger.info("Cart item removed", cart_id=cart.id, product_id=item.product_id)
        return self.to_output(cart)

    def clear(self, session_id: str | None) -> CartOutput:
        cart = self.require_active(session_id)
        self._release_all(cart)
        cart.items.clear()
        cart.updated_at = utcnow()
        self._commit("vaciar carrito", cart)

        logger.info("Cart cleared", cart_id=cart.id)
        return self.to_output(cart)

    # =========================================================================
    # Helpers
    # =========================================================================

    def to_output(self, cart: Cart) -> CartOutput:
        return CartOutput.model_validate(cart)

    def _active_cart(self, session_id: str) -> Cart | None:
        """Active cart of a session; an expired one is abandoned and its stock released."""
        cart = self.carts.find_active_by_session(session_id)
        if cart is not None and cart.expires_at < utcnow():
            self._release_all(cart)
            cart.status = CartStatus.ABANDONED
            self._commit("abandonar carrito")
            logger.info("Expired cart abandoned", cart_id=cart.id)
            return None
        return cart

    def _release_all(self, cart: Cart) -> None:
        for item in cart.items:
            self._products.release_stock(item.product_id, item.quantity)

    def _take_stock(self, product: Product, quantity: int) -> None:
        if not self._products.reserve_stock(product.id, quantity):
            available = self._products.current_stock(product.id)
            raise InsufficientStockError(product.name, available, product_id=product.id)

    def _require_item(self, cart: Cart, target: CartItemTarget) -> CartItem:
        item = self.carts.find_item(cart, target.item_id, target.product_id)
        if item is None:
            raise NotFoundError("Producto en el carrito")
        return item

    @staticmethod
    def _normalize_customizations(customizations: CartCustomizations | None) -> dict[str, Any]:
        return (customizations or CartCustomizations()).model_dump(by_alias=True)
