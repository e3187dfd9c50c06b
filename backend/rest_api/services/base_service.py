"""
Base Service Classes.

Provides base classes for application services that:
- Use a Repository for data access (not direct queries in routers)
- Convert entities to output DTOs
- Handle business rules and orchestration

Architecture:
    Router (thin) → Service (business logic) → Repository (data access) → Model

Usage:
    from rest_api.services.base_service import BaseCRUDService

    class AreaService(BaseCRUDService[Area, AreaOutput]):
        def __init__(self, db: Session):
            super().__init__(
                db=db,
                model=Area,
                output_schema=AreaOutput,
                entity_name="Área",
            )
"""

from __future__ import annotations

from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Base
from rest_api.repositories.base import BaseRepository, ModelRepository, RepositoryFilters
from shared.infrastructure.db import safe_commit
from shared.config.logging import get_logger
from shared.utils.exceptions import DatabaseError, NotFoundError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseService(Generic[ModelT]):
    """
    Base service for domain operations.

    Subclasses implement specific business logic while this class
    provides common infrastructure (repository access, commit handling).
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        repository: BaseRepository[ModelT] | None = None,
    ):
        self._db = db
        self._model = model
        self._repo = repository or ModelRepository(model, db)

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @property
    def repo(self) -> BaseRepository[ModelT]:
        """Repository for data access."""
        return self._repo

    def _commit(self, operation: str, *entities: Any) -> None:
        """
        Commit the unit of work and refresh the given entities.

        IntegrityError propagates so the API maps it to a 400; any other
        database failure becomes a DatabaseError.
        """
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise
        except Exception as e:
            logger.error(f"Failed to {operation}", error=str(e))
            raise DatabaseError(operation)
        for entity in entities:
            self._db.refresh(entity)


class BaseCRUDService(BaseService[ModelT], Generic[ModelT, OutputT]):
    """
    Base service for entities with CRUD operations.

    Provides standard CRUD methods that can be overridden for
    custom business logic.

    Responsibilities:
    - Data access via Repository
    - DTO transformation via output schema
    - Audit fields on mutations
    - Business rule validation through hooks
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        *,
        repository: BaseRepository[ModelT] | None = None,
        supports_soft_delete: bool = True,
    ):
        super().__init__(db, model, repository)
        self._output_schema = output_schema
        self._entity_name = entity_name
        self._supports_soft_delete = supports_soft_delete

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._entity_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_entity(self, entity_id: int, *, include_inactive: bool = False) -> ModelT:
        """
        Get raw entity (for internal use).

        Raises:
            NotFoundError: If entity not found.
        """
        entity = self._repo.find_by_id(entity_id, include_deleted=include_inactive)
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id)
        return entity

    def get_by_id(self, entity_id: int, *, include_inactive: bool = False) -> OutputT:
        """Get entity by ID as an output DTO."""
        return self.to_output(self.get_entity(entity_id, include_inactive=include_inactive))

    def list_all(
        self,
        filters: RepositoryFilters | None = None,
        *,
        order_by: Any | None = None,
    ) -> list[OutputT]:
        entities = self._repo.find_all(filters, order_by=order_by)
        return [self.to_output(e) for e in entities]

    def count(self, filters: RepositoryFilters | None = None) -> int:
        return self._repo.count(filters)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, data: dict[str, Any], user_id: int | None = None) -> OutputT:
        """
        Create new entity.

        Args:
            data: Entity data dictionary (model attribute names).
            user_id: Creating user ID.

        Returns:
            Output DTO for created entity.

        Raises:
            ValidationError: If data breaks a business rule.
            DatabaseError: If creation fails.
        """
        self._validate_create(data)

        entity = self._model(**data)
        entity.set_created_by(user_id)
        self._db.add(entity)
        self._commit(f"crear {self._entity_name.lower()}", entity)

        self._after_create(entity, user_id)
        return self.to_output(entity)

    def update(
        self,
        entity_id: int,
        data: dict[str, Any],
        user_id: int | None = None,
    ) -> OutputT:
        """
        Update existing entity with the given fields.

        Raises:
            NotFoundError: If entity not found.
            ValidationError: If data breaks a business rule.
            DatabaseError: If update fails.
        """
        entity = self.get_entity(entity_id, include_inactive=True)

        self._validate_update(entity, data)

        old_values = {k: getattr(entity, k) for k in data.keys() if hasattr(entity, k)}
        for field_name, value in data.items():
            if hasattr(entity, field_name):
                setattr(entity, field_name, value)

        entity.set_updated_by(user_id)
        self._commit(f"actualizar {self._entity_name.lower()}", entity)

        self._after_update(entity, old_values, user_id)
        return self.to_output(entity)

    def delete(self, entity_id: int, user_id: int | None = None) -> None:
        """
        Delete entity (soft delete if supported).

        Raises:
            NotFoundError: If entity not found.
        """
        entity = self.get_entity(entity_id, include_inactive=not self._supports_soft_delete)

        self._validate_delete(entity)
        entity_info = {"id": entity.id, "name": getattr(entity, "name", None)}

        if self._supports_soft_delete:
            entity.soft_delete(user_id)
        else:
            self._db.delete(entity)
        self._commit(f"eliminar {self._entity_name.lower()}")

        self._after_delete(entity_info, user_id)

    def toggle_active(self, entity_id: int, user_id: int | None = None) -> OutputT:
        """Flip the is_active flag."""
        entity = self.get_entity(entity_id, include_inactive=True)
        entity.is_active = not entity.is_active
        entity.set_updated_by(user_id)
        self._commit(f"actualizar {self._entity_name.lower()}", entity)
        logger.info(
            f"{self._entity_name} toggled",
            entity_id=entity_id,
            is_active=entity.is_active,
            user_id=user_id,
        )
        return self.to_output(entity)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT) -> OutputT:
        """
        Convert entity to output DTO.

        Override this method for custom transformation logic.
        """
        return self._output_schema.model_validate(entity)

    # =========================================================================
    # Validation Hooks (override in subclasses)
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        """Validate data before create. Raises ValidationError."""
        pass

    def _validate_update(self, entity: ModelT, data: dict[str, Any]) -> None:
        """Validate data before update. Raises ValidationError."""
        pass

    def _validate_delete(self, entity: ModelT) -> None:
        """Validate before delete (dependent entities, etc.)."""
        pass

    # =========================================================================
    # Lifecycle Hooks (override in subclasses)
    # =========================================================================

    def _after_create(self, entity: ModelT, user_id: int | None) -> None:
        """Hook called after entity creation."""
        logger.info(f"{self._entity_name} created", entity_id=entity.id, user_id=user_id)

    def _after_update(
        self,
        entity: ModelT,
        old_values: dict[str, Any],
        user_id: int | None,
    ) -> None:
        """Hook called after entity update."""
        logger.info(
            f"{self._entity_name} updated",
            entity_id=entity.id,
            fields=sorted(old_values.keys()),
            user_id=user_id,
        )

    def _after_delete(self, entity_info: dict[str, Any], user_id: int | None) -> None:
        """Hook called after entity deletion."""
        logger.info(f"{self._entity_name} deleted", entity_id=entity_info["id"], user_id=user_id)
