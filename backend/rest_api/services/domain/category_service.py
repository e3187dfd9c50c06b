"""
Category Service - menu categories.

Products reference categories by name, so renames are propagated to the
products and deleting a category that still has products is refused.

Usage:
    from rest_api.services.domain import CategoryService

    service = CategoryService(db)
    categories = service.list_categories(active_only=True)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, func, update
from sqlalchemy.orm import Session

from rest_api.models import Category, Product
from rest_api.repositories import CategoryRepository, RepositoryFilters
from rest_api.services.base_service import BaseCRUDService
from shared.config.constants import DEFAULT_CATEGORIES
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.shop_schemas import CategoryOrderItem, CategoryOutput
from shared.utils.validators import slugify

logger = get_logger(__name__)


class CategoryService(BaseCRUDService[Category, CategoryOutput]):
    """
    Service for category management.

    Business rules:
    - Names are unique case-insensitively (slug collisions count as duplicates)
    - is_active is a visibility toggle; delete is a hard delete
    - A category with products cannot be deleted
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Category,
            output_schema=CategoryOutput,
            entity_name="Categoría",
            repository=CategoryRepository(db),
            supports_soft_delete=False,
        )

    @property
    def categories(self) -> CategoryRepository:
        return self._repo

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_categories(self, *, active_only: bool = False) -> list[CategoryOutput]:
        entities = self.categories.find_all(RepositoryFilters(include_deleted=not active_only))
        counts = self.categories.product_counts()
        return [self._with_count(c, counts) for c in entities]

    def get_category(self, category_id: int) -> CategoryOutput:
        return self.to_output(self.get_entity(category_id, include_inactive=True))

    def to_output(self, entity: Category) -> CategoryOutput:
        return self._with_count(entity, self.categories.product_counts())

    # =========================================================================
    # Command Methods
    # =========================================================================

    def reorder(self, items: list[CategoryOrderItem], user_id: int | None) -> list[CategoryOutput]:
        """Apply explicit display orders."""
        ids = [item.id for item in items]
        found = {c.id: c for c in self.categories.find_by_ids(ids, include_deleted=True)}
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFoundError("Categoría", missing[0])

        for item in items:
            category = found[item.id]
            category.display_order = item.display_order
            category.set_updated_by(user_id)
        self._commit("reordenar categorías")

        logger.info("Categories reordered", count=len(items), user_id=user_id)
        return self.list_categories()

    def seed_defaults(self, user_id: int | None) -> list[CategoryOutput]:
        """Create the default categories; refused when any category exists."""
        existing = self.categories.count(RepositoryFilters(include_deleted=True))
        if existing:
            raise ValidationError(f"Ya existen {existing} categorías. No se puede sembrar.")
        return self._create_defaults(user_id)

    def reset(self, user_id: int | None) -> list[CategoryOutput]:
        """Delete every category and recreate the defaults."""
        self._db.execute(delete(Category))
        self._db.flush()
        logger.warning("Categories reset", user_id=user_id)
        return self._create_defaults(user_id)

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        slug = slugify(data["name"])
        if not slug:
            raise ValidationError("El nombre de la categoría no es válido")
        if self.categories.find_by_name_or_slug(data["name"], slug):
            raise ValidationError("Ya existe una categoría con ese nombre")
        data["slug"] = slug
        # Unordered categories go last
        if not data.get("display_order"):
            data["display_order"] = self.categories.next_display_order()

    def _validate_update(self, entity: Category, data: dict[str, Any]) -> None:
        name = data.get("name")
        if name is None or name == entity.name:
            return
        slug = slugify(name)
        if not slug:
            raise ValidationError("El nombre de la categoría no es válido")
        if self.categories.find_by_name_or_slug(name, slug, exclude_id=entity.id):
            raise ValidationError("Ya existe otra categoría con ese nombre")
        data["slug"] = slug

    def _validate_delete(self, entity: Category) -> None:
        product_count = self.categories.product_counts().get(entity.name.lower(), 0)
        if product_count:
            raise ValidationError(
                f"No se puede eliminar. Esta categoría tiene {product_count} productos asociados. "
                "Mueve o elimina los productos primero."
            )

    def _after_update(self, entity: Category, old_values: dict[str, Any], user_id: int | None) -> None:
        old_name = old_values.get("name")
        if old_name and old_name != entity.name:
            self._db.execute(
                update(Product)
                .where(func.lower(Product.category) == old_name.lower())
                .values(category=entity.name)
            )
            self._commit("renombrar categoría en productos")
        super()._after_update(entity, old_values, user_id)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _create_defaults(self, user_id: int | None) -> list[CategoryOutput]:
        created = []
        for data in DEFAULT_CATEGORIES:
            category = Category(**data, slug=slugify(data["name"]))
            category.set_created_by(user_id)
            self._db.add(category)
            created.append(category)
        self._commit("crear categorías", *created)

        logger.info("Default categories created", count=len(created), user_id=user_id)
        counts = self.categories.product_counts()
        return [self._with_count(c, counts) for c in created]

    @staticmethod
    def _with_count(category: Category, counts: dict[str, int]) -> CategoryOutput:
        output = CategoryOutput.model_validate(category)
        output.product_count = counts.get(category.name.lower(), 0)
        return output
