"""
Order Repository - Data access for orders.
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import selectinload

from rest_api.models import Order, OrderItem
from shared.config.constants import OrderStatus, PaymentStatus
from .base import BaseRepository, RepositoryFilters


@dataclass
class OrderFilters(RepositoryFilters):
    """Filters specific to orders."""

    user_id: int | None = None
    status: str | None = None
    statuses: list[str] | None = None
    delivery_type: str | None = None


class OrderRepository(BaseRepository[Order]):
    """
    Repository for Order entities.

    Guarantees eager loading of:
    - items
    """

    model = Order

    def _base_query(self) -> Select:
        return select(Order).options(selectinload(Order.items))

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, OrderFilters):
            return query

        if filters.user_id is not None:
            query = query.where(Order.user_id == filters.user_id)
        if filters.status:
            query = query.where(Order.status == filters.status)
        if filters.statuses:
            query = query.where(Order.status.in_(filters.statuses))
        if filters.delivery_type:
            query = query.where(Order.delivery_type == filters.delivery_type)
        return query

    def user_has_delivered_product(self, user_id: int, product_id: int) -> bool:
        """Whether the user has a delivered order containing the product."""
        found = self._db.scalar(
            select(OrderItem.id)
            .join(Order, Order.id == OrderItem.order_id)
            .where(
                Order.user_id == user_id,
                Order.status == OrderStatus.DELIVERED,
                OrderItem.product_id == product_id,
            )
            .limit(1)
        )
        return found is not None

    def counts_by_user(self, user_ids: list[int]) -> dict[int, int]:
        if not user_ids:
            return {}
        rows = self._db.execute(
            select(Order.user_id, func.count(Order.id))
            .where(Order.user_id.in_(user_ids))
            .group_by(Order.user_id)
        ).all()
        return {user_id: count for user_id, count in rows}

    def paid_revenue(self) -> float:
        total = self._db.scalar(
            select(func.coalesce(func.sum(Order.total_price), 0.0))
            .where(Order.payment_status == PaymentStatus.PAID)
        )
        return round(float(total or 0), 2)

    def kitchen_queue(self) -> Sequence[Order]:
        """Orders the kitchen is working on, oldest first."""
        return self._db.execute(
            self._base_query()
            .where(Order.status.in_(OrderStatus.KITCHEN_VISIBLE))
            .order_by(Order.created_at.asc(), Order.id.asc())
        ).scalars().unique().all()