"""
Cart Repository - Data access for carts and their lines.
"""

from sqlalchemy import Select, or_, select
from sqlalchemy.orm import selectinload

from rest_api.models import Cart, CartItem
from shared.config.constants import CartStatus
from .base import BaseRepository


class CartRepository(BaseRepository[Cart]):
    """
    Repository for Cart entities.

    Guarantees eager loading of:
    - items
    """

    model = Cart

    def _base_query(self) -> Select:
        return select(Cart).options(selectinload(Cart.items))

    def find_active_by_session(self, session_id: str) -> Cart | None:
        return self._db.scalar(
            self._base_query().where(
                Cart.session_id == session_id,
                Cart.status == CartStatus.ACTIVE,
            )
        )

    def find_active_for_checkout(self, user_id: int, session_id: str | None) -> Cart | None:
        """Active cart of the user, or of the session the user shopped with anonymously."""
        owners = [Cart.user_id == user_id]
        if session_id:
            owners.append(Cart.session_id == session_id)
        return self._db.scalar(
            self._base_query()
            .where(Cart.status == CartStatus.ACTIVE, or_(*owners))
            .order_by(Cart.updated_at.desc(), Cart.id.desc())
            .limit(1)
        )

    def find_item(self, cart: Cart, item_id: int | None, product_id: int | None) -> CartItem | None:
        """Cart line by id, or the first line of a product."""
        for item in cart.items:
            if item_id is not None and item.id == item_id:
                return item
            if item_id is None and product_id is not None and item.product_id == product_id:
                return item
        return None