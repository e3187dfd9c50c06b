"""
Base Repository implementation.
Provides common data access patterns with soft-delete awareness.
"""

from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from shared.config.constants import Limits


ModelT = TypeVar("ModelT")


@dataclass
class RepositoryFilters:
    """Base filters for repository queries."""

    # Pagination (None = no limit)
    limit: int | None = None
    offset: int = 0

    # Soft delete
    include_deleted: bool = False

    # Search
    search: str | None = None

    def __post_init__(self):
        """Validate and normalize filters."""
        if self.limit is not None:
            self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)
        if self.search:
            self.search = self.search.strip()[:Limits.MAX_SEARCH_LENGTH] or None


class BaseRepository(Generic[ModelT]):
    """
    Base repository with common operations.

    Subclasses set `model` and may override:
    - _base_query(): base select with eager loading
    - _apply_filters(): entity-specific filters
    """

    model: type[ModelT]

    def __init__(self, db: Session):
        self._db = db

    @property
    def db(self) -> Session:
        return self._db

    def _base_query(self) -> Select:
        return select(self.model)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        """Apply entity-specific filters to query."""
        return query

    def _active_only(self, query: Select, include_deleted: bool) -> Select:
        if not include_deleted and hasattr(self.model, "is_active"):
            query = query.where(self.model.is_active.is_(True))
        return query

    def find_all(
        self,
        filters: RepositoryFilters | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """
        Find all entities matching filters.

        Args:
            filters: Optional filters
            order_by: Order expression (or list of expressions)

        Returns:
            List of entities
        """
        filters = filters or RepositoryFilters()
        query = self._active_only(self._base_query(), filters.include_deleted)
        query = self._apply_filters(query, filters)

        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                query = query.order_by(*order_by)
            else:
                query = query.order_by(order_by)

        if filters.offset:
            query = query.offset(filters.offset)
        if filters.limit is not None:
            query = query.limit(filters.limit)

        return self._db.execute(query).scalars().unique().all()

    def find_by_id(self, entity_id: int, include_deleted: bool = False) -> ModelT | None:
        query = self._base_query().where(self.model.id == entity_id)
        query = self._active_only(query, include_deleted)
        return self._db.scalar(query)

    def find_by_ids(self, entity_ids: list[int], include_deleted: bool = False) -> Sequence[ModelT]:
        """Find entities by IDs (order not guaranteed)."""
        if not entity_ids:
            return []
        query = self._base_query().where(self.model.id.in_(entity_ids))
        query = self._active_only(query, include_deleted)
        return self._db.execute(query).scalars().unique().all()

    def count(self, filters: RepositoryFilters | None = None) -> int:
        """Count entities matching filters (pagination is ignored)."""
        filters = filters or RepositoryFilters()
        query = self._active_only(select(self.model), filters.include_deleted)
        query = self._apply_filters(query, filters)
        return self._db.scalar(select(func.count()).select_from(query.subquery())) or 0

    def exists(self, entity_id: int) -> bool:
        return self.find_by_id(entity_id) is not None

    def save(self, entity: ModelT) -> ModelT:
        """Add entity to the session and flush it (the caller commits)."""
        self._db.add(entity)
        self._db.flush()
        self._db.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        """Hard delete entity (the caller commits)."""
        self._db.delete(entity)
        self._db.flush()


class ModelRepository(BaseRepository[ModelT]):
    """Repository for a model with no entity-specific queries."""

    def __init__(self, model: type[ModelT], db: Session):
        super().__init__(db)
        self.model = model
