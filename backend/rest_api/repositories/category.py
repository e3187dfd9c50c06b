"""
Category Repository - Data access for menu categories.
"""

from dataclasses import dataclass

from sqlalchemy import Select, func, select

from rest_api.models import Category, Product
from .base import BaseRepository, RepositoryFilters


@dataclass
class CategoryFilters(RepositoryFilters):
    """Filters specific to categories."""

    exclude_id: int | None = None


class CategoryRepository(BaseRepository[Category]):
    """
    Repository for Category entities.

    is_active is the category's visibility toggle, so admin listings pass
    include_deleted=True to see hidden categories.
    """

    model = Category

    def _base_query(self) -> Select:
        return select(Category).order_by(Category.display_order, Category.name)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if filters.search:
            query = query.where(Category.name.ilike(f"%{filters.search}%"))
        if isinstance(filters, CategoryFilters) and filters.exclude_id is not None:
            query = query.where(Category.id != filters.exclude_id)
        return query

    def find_by_name_or_slug(
        self,
        name: str,
        slug: str,
        exclude_id: int | None = None,
    ) -> Category | None:
        """Case-insensitive name or slug lookup used for uniqueness checks."""
        query = select(Category).where(
            (func.lower(Category.name) == name.lower()) | (Category.slug == slug)
        )
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        return self._db.scalar(query.limit(1))

    def product_counts(self) -> dict[str, int]:
        """Active products per lowercase category name."""
        rows = self._db.execute(
            select(func.lower(Product.category), func.count(Product.id))
            .where(Product.is_active.is_(True), Product.category.is_not(None))
            .group_by(func.lower(Product.category))
        ).all()
        return {name: count for name, count in rows}

    def next_display_order(self) -> int:
        max_order = self._db.scalar(select(func.max(Category.display_order)))
        return (max_order or 0) + 1