"""
Location Service - restaurant branches shown on the locations page.

Usage:
    from rest_api.services.domain import LocationService

    service = LocationService(db)
    locations = service.list_locations(active_only=True, city="Quito")
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Location
from rest_api.repositories import LocationFilters, LocationRepository
from rest_api.services.base_service import BaseCRUDService
from shared.infrastructure.storage import delete_image
from shared.utils.content_schemas import LocationCreate, LocationOutput, LocationUpdate


class LocationService(BaseCRUDService[Location, LocationOutput]):
    """
    Service for locations.

    Business rules:
    - Flagship locations are listed first
    - Deleting a location is a soft delete
    - A replaced image is removed from storage
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Location,
            output_schema=LocationOutput,
            entity_name="Ubicación",
            repository=LocationRepository(db),
        )

    def list_locations(self, *, active_only: bool = False, city: str | None = None) -> list[LocationOutput]:
        filters = LocationFilters(include_deleted=not active_only, city=city)
        return self.list_all(
            filters,
            order_by=[Location.is_flagship.desc(), Location.created_at.desc(), Location.id.desc()],
        )

    def create_location(
        self,
        body: LocationCreate,
        user_id: int,
        image_url: str | None = None,
    ) -> LocationOutput:
        data = self._to_data(body.model_dump())
        if image_url:
            data["image_url"] = image_url
        return self.create(data, user_id)

    def update_location(
        self,
        location_id: int,
        body: LocationUpdate,
        user_id: int,
        image_url: str | None = None,
    ) -> LocationOutput:
        data = self._to_data(body.model_dump(exclude_unset=True))
        if image_url:
            data["image_url"] = image_url
        return self.update(location_id, data, user_id)

    @staticmethod
    def _to_data(fields: dict[str, Any]) -> dict[str, Any]:
        """Map input field names to columns; coordinates arrive as lat/lng."""
        data = dict(fields)
        if "lat" in data:
            data["latitude"] = data.pop("lat")
        if "lng" in data:
            data["longitude"] = data.pop("lng")
        # Optional text fields may be cleared; everything else needs a value
        return {
            k: v for k, v in data.items()
            if v is not None or k in ("email", "description", "image_url")
        }

    def _after_update(self, entity: Location, old_values: dict[str, Any], user_id: int | None) -> None:
        old_image = old_values.get("image_url")
        if old_image and old_image != entity.image_url:
            delete_image(old_image)
        super()._after_update(entity, old_values, user_id)
