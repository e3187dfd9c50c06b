"""
Area router - /areas/*
CLEAN-ARCH: Thin router delegating to AreaService.
"""

import asyncio

from fastapi import APIRouter, Depends, Request, UploadFile, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import ok, parse_model, read_payload, require_admin, uploaded_image
from rest_api.services.domain import AreaService
from shared.config.constants import UploadFolders
from shared.infrastructure.db import get_db
from shared.utils.booking_schemas import AreaCreate, AreaOutput, AreaUpdate


router = APIRouter(prefix="/areas", tags=["areas"])


# Upload and persistence block, so multipart handlers run them off the event loop
def _create_area(db: Session, body: AreaCreate, image: UploadFile | None, admin_id: int) -> AreaOutput:
    with uploaded_image(image, UploadFolders.AREAS) as image_url:
        data = body.model_dump()
        if image_url:
            data["image_url"] = image_url
        return AreaService(db).create(data, admin_id)


def _update_area(
    db: Session, area_id: int, body: AreaUpdate, image: UploadFile | None, admin_id: int
) -> AreaOutput:
    service = AreaService(db)
    service.get_entity(area_id, include_inactive=True)
    with uploaded_image(image, UploadFolders.AREAS) as image_url:
        data = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
        if image_url:
            data["image_url"] = image_url
        return service.update(area_id, data, admin_id)


@router.get("")
def list_areas(active_only: bool = False, db: Session = Depends(get_db)) -> dict:
    areas = AreaService(db).list_areas(active_only=active_only)
    return ok(areas, count=len(areas))


@router.get("/{area_id}")
def get_area(area_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(AreaService(db).get_by_id(area_id, include_inactive=True))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_area(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    """Create an area; accepts multipart with an optional image."""
    fields, image = await read_payload(request)
    body = parse_model(AreaCreate, fields)
    area = await asyncio.to_thread(_create_area, db, body, image, admin.id)
    return ok(area, message="Área creada exitosamente")


@router.put("/{area_id}")
async def update_area(
    area_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    fields, image = await read_payload(request)
    body = parse_model(AreaUpdate, fields)
    area = await asyncio.to_thread(_update_area, db, area_id, body, image, admin.id)
    return ok(area, message="Área actualizada exitosamente")


@router.delete("/{area_id}")
def delete_area(
    area_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    AreaService(db).delete(area_id, admin.id)
    return ok(message="Área eliminada exitosamente")


@router.patch("/{area_id}/toggle-status")
def toggle_area(
    area_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    area = AreaService(db).toggle_active(area_id, admin.id)
    state = "activada" if area.is_active else "desactivada"
    return ok(area, message=f"Área {state} exitosamente")
