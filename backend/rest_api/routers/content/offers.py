"""
Offer router - /offers/*
CLEAN-ARCH: Thin router delegating to OfferService.

Multipart bodies carry items, validDays and badge as JSON strings.
"""

import asyncio

from fastapi import APIRouter, Depends, Request, UploadFile, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import ok, parse_model, read_payload, require_admin, uploaded_image
from rest_api.services.domain import OfferService
from shared.config.constants import UploadFolders
from shared.infrastructure.db import get_db
from shared.utils.content_schemas import OfferCreate, OfferOutput, OfferUpdate


router = APIRouter(prefix="/offers", tags=["offers"])


# Upload and persistence block, so multipart handlers run them off the event loop
def _create_offer(db: Session, body: OfferCreate, image: UploadFile | None, admin_id: int) -> OfferOutput:
    with uploaded_image(image, UploadFolders.OFFERS) as image_url:
        return OfferService(db).create_offer(body, admin_id, image_url)


def _update_offer(
    db: Session, offer_id: int, body: OfferUpdate, image: UploadFile | None, admin_id: int
) -> OfferOutput:
    service = OfferService(db)
    service.get_entity(offer_id, include_inactive=True)
    with uploaded_image(image, UploadFolders.OFFERS) as image_url:
        return service.update_offer(offer_id, body, admin_id, image_url)


@router.get("")
def list_offers(db: Session = Depends(get_db)) -> dict:
    offers = OfferService(db).list_offers()
    return ok(offers, count=len(offers))


@router.get("/{offer_id}")
def get_offer(offer_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(OfferService(db).get_offer(offer_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_offer(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    fields, image = await read_payload(request)
    body = parse_model(OfferCreate, fields)
    offer = await asyncio.to_thread(_create_offer, db, body, image, admin.id)
    return ok(offer, message="Oferta creada exitosamente")


@router.put("/{offer_id}")
async def update_offer(
    offer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    fields, image = await read_payload(request)
    body = parse_model(OfferUpdate, fields)
    offer = await asyncio.to_thread(_update_offer, db, offer_id, body, image, admin.id)
    return ok(offer, message="Oferta actualizada exitosamente")


@router.delete("/{offer_id}")
def delete_offer(
    offer_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    """Remove the offer and its stored image."""
    OfferService(db).delete(offer_id, admin.id)
    return ok(message="Oferta eliminada exitosamente")
