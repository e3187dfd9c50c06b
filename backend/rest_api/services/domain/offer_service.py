"""
Offer Service - combo promotions.

Usage:
    from rest_api.services.domain import OfferService

    service = OfferService(db)
    offers = service.list_offers()
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Offer
from rest_api.models.content import DEFAULT_BADGE
from rest_api.repositories import OfferRepository, RepositoryFilters
from rest_api.services.base_service import BaseCRUDService
from shared.infrastructure.storage import delete_image
from shared.utils.content_schemas import OfferCreate, OfferOutput, OfferUpdate
from shared.utils.exceptions import ValidationError


class OfferService(BaseCRUDService[Offer, OfferOutput]):
    """
    Service for offers.

    Business rules:
    - offer_price < original_price and end_date >= start_date, also after partial updates
    - discount is derived from both prices on every write
    - Offers are hard deleted together with their image
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Offer,
            output_schema=OfferOutput,
            entity_name="Oferta",
            repository=OfferRepository(db),
            supports_soft_delete=False,
        )

    def list_offers(self) -> list[OfferOutput]:
        return self.list_all(
            RepositoryFilters(include_deleted=True),
            order_by=[Offer.created_at, Offer.id],
        )

    def get_offer(self, offer_id: int) -> OfferOutput:
        return self.get_by_id(offer_id, include_inactive=True)

    def create_offer(self, body: OfferCreate, user_id: int, image_url: str | None = None) -> OfferOutput:
        data = self._to_data(body.model_dump())
        data.setdefault("badge", dict(DEFAULT_BADGE))
        if image_url:
            data["image_url"] = image_url
        return self.create(data, user_id)

    def update_offer(
        self,
        offer_id: int,
        body: OfferUpdate,
        user_id: int,
        image_url: str | None = None,
    ) -> OfferOutput:
        data = self._to_data(body.model_dump(exclude_unset=True))
        if image_url:
            data["image_url"] = image_url
        return self.update(offer_id, data, user_id)

    @staticmethod
    def _to_data(fields: dict[str, Any]) -> dict[str, Any]:
        data = {k: v for k, v in fields.items() if v is not None}
        if "active" in data:
            data["is_active"] = data.pop("active")
        return data

    # =========================================================================
    # Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        self._check_and_price(
            data,
            data["original_price"],
            data["offer_price"],
            data["start_date"],
            data["end_date"],
        )

    def _validate_update(self, entity: Offer, data: dict[str, Any]) -> None:
        self._check_and_price(
            data,
            data.get("original_price", entity.original_price),
            data.get("offer_price", entity.offer_price),
            data.get("start_date", entity.start_date),
            data.get("end_date", entity.end_date),
        )

    @staticmethod
    def _check_and_price(data: dict[str, Any], original_price, offer_price, start_date, end_date) -> None:
        """Validate the merged values and store the derived discount in data."""
        if offer_price >= original_price:
            raise ValidationError("El precio de oferta debe ser menor al precio original")
        if end_date.date() < start_date.date():
            raise ValidationError("La fecha de fin debe ser posterior o igual a la fecha de inicio")
        data["discount"] = Offer.discount_percent(original_price, offer_price)

    def _after_update(self, entity: Offer, old_values: dict[str, Any], user_id: int | None) -> None:
        old_image = old_values.get("image_url")
        if old_image and old_image != entity.image_url:
            delete_image(old_image)
        super()._after_update(entity, old_values, user_id)

    def delete(self, entity_id: int, user_id: int | None = None) -> None:
        image_url = self.get_entity(entity_id, include_inactive=True).image_url
        super().delete(entity_id, user_id)
        delete_image(image_url)
