"""
Product Repository - Data access for menu products.

Stock changes are single conditional UPDATE statements so two concurrent
requests can never take the stock below zero.
"""

from dataclasses import dataclass

from sqlalchemy import Select, func, select, update

from rest_api.models import Product
from .base import BaseRepository, RepositoryFilters


@dataclass
class ProductFilters(RepositoryFilters):
    """Filters specific to products."""

    category: str | None = None
    available: bool | None = None


class ProductRepository(BaseRepository[Product]):
    """Repository for Product entities."""

    model = Product

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, ProductFilters):
            return query

        if filters.category:
            query = query.where(func.lower(Product.category) == filters.category.lower())
        if filters.available is not None:
            query = query.where(Product.available.is_(filters.available))
        if filters.search:
            query = query.where(Product.name.ilike(f"%{filters.search}%"))

        return query

    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        """
        Decrement stock by quantity when enough is available.

        Returns:
            True when the stock was taken, False when it was insufficient.
        """
        if quantity <= 0:
            return True
        result = self._db.execute(
            update(Product)
            .where(Product.id == product_id, Product.current_stock >= quantity)
            .values(current_stock=Product.current_stock - quantity)
        )
        return result.rowcount == 1

    def release_stock(self, product_id: int, quantity: int) -> None:
        """Give quantity units back to the product's stock."""
        if quantity <= 0:
            return
        self._db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(current_stock=Product.current_stock + quantity)
        )

    def current_stock(self, product_id: int) -> int:
        return self._db.scalar(select(Product.current_stock).where(Product.id == product_id)) or 0