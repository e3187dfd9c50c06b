"""
Location router - /locations/*
CLEAN-ARCH: Thin router delegating to LocationService.
"""

import asyncio

from fastapi import APIRouter, Depends, Request, UploadFile, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import ok, parse_model, read_payload, require_admin, uploaded_image
from rest_api.services.domain import LocationService
from shared.config.constants import UploadFolders
from shared.infrastructure.db import get_db
from shared.utils.content_schemas import LocationCreate, LocationOutput, LocationUpdate


router = APIRouter(prefix="/locations", tags=["locations"])


# Upload and persistence block, so multipart handlers run them off the event loop
def _create_location(
    db: Session, body: LocationCreate, image: UploadFile | None, admin_id: int
) -> LocationOutput:
    with uploaded_image(image, UploadFolders.LOCATIONS) as image_url:
        return LocationService(db).create_location(body, admin_id, image_url)


def _update_location(
    db: Session, location_id: int, body: LocationUpdate, image: UploadFile | None, admin_id: int
) -> LocationOutput:
    service = LocationService(db)
    service.get_entity(location_id, include_inactive=True)
    with uploaded_image(image, UploadFolders.LOCATIONS) as image_url:
        return service.update_location(location_id, body, admin_id, image_url)


@router.get("")
def list_locations(
    active_only: bool = False,
    city: str | None = None,
    db: Session = Depends(get_db),
) -> dict:
    """Restaurant branches, flagship first."""
    locations = LocationService(db).list_locations(active_only=active_only, city=city)
    return ok(locations, count=len(locations))


@router.get("/{location_id}")
def get_location(location_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(LocationService(db).get_by_id(location_id, include_inactive=True))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_location(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    fields, image = await read_payload(request)
    body = parse_model(LocationCreate, fields)
    location = await asyncio.to_thread(_create_location, db, body, image, admin.id)
    return ok(location, message="Ubicación creada exitosamente")


@router.put("/{location_id}")
async def update_location(
    location_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    fields, image = await read_payload(request)
    body = parse_model(LocationUpdate, fields)
    location = await asyncio.to_thread(_update_location, db, location_id, body, image, admin.id)
    return ok(location, message="Ubicación actualizada exitosamente")


@router.delete("/{location_id}")
def delete_location(
    location_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    LocationService(db).delete(location_id, admin.id)
    return ok(message="Ubicación eliminada exitosamente")


@router.patch("/{location_id}/toggle")
def toggle_location(
    location_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    location = LocationService(db).toggle_active(location_id, admin.id)
    state = "activada" if location.is_active else "desactivada"
    return ok(location, message=f"Ubicación {state} exitosamente")
