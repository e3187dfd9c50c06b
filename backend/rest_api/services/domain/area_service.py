"""
Area Service - reservable dining areas.

Usage:
    from rest_api.services.domain import AreaService

    service = AreaService(db)
    areas = service.list_areas(active_only=True)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Area
from rest_api.repositories import RepositoryFilters
from rest_api.services.base_service import BaseCRUDService
from shared.infrastructure.storage import delete_image
from shared.utils.booking_schemas import AreaOutput
from shared.utils.exceptions import ValidationError


class AreaService(BaseCRUDService[Area, AreaOutput]):
    """
    Service for area management.

    Business rules:
    - max_capacity >= min_capacity, also after partial updates
    - Deleting an area is a soft delete; the toggle flips visibility
    - A replaced image is removed from storage
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Area,
            output_schema=AreaOutput,
            entity_name="Área",
        )

    def list_areas(self, *, active_only: bool = False) -> list[AreaOutput]:
        return self.list_all(
            RepositoryFilters(include_deleted=not active_only),
            order_by=Area.name,
        )

    def _validate_update(self, entity: Area, data: dict[str, Any]) -> None:
        min_capacity = data.get("min_capacity", entity.min_capacity)
        max_capacity = data.get("max_capacity", entity.max_capacity)
        if max_capacity < min_capacity:
            raise ValidationError("La capacidad máxima debe ser mayor o igual a la mínima")

    def _after_update(self, entity: Area, old_values: dict[str, Any], user_id: int | None) -> None:
        old_image = old_values.get("image_url")
        if old_image and old_image != entity.image_url:
            delete_image(old_image)
        super()._after_update(entity, old_values, user_id)
