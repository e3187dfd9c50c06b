"""
About Us router - /api/about/*

The page is a single document; sections are edited one at a time by the
admin screens. Image endpoints take a multipart field named "image".
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import ok, require_admin, uploaded_image
from rest_api.services.domain import AboutService
from shared.config.constants import UploadFolders
from shared.infrastructure.db import get_db
from shared.utils.content_schemas import (
    AboutUsUpdate,
    CtaUpdate,
    GalleryUpdate,
    HeroUpdate,
    MissionUpdate,
    TeamUpdate,
    TimelineUpdate,
    ValuesUpdate,
)
from shared.utils.exceptions import ValidationError


router = APIRouter(prefix="/api/about", tags=["about"])


def _require_image(image: UploadFile | None) -> UploadFile:
    if image is None or not image.filename:
        raise ValidationError("No se proporcionó ninguna imagen")
    return image


@router.get("")
def get_about(db: Session = Depends(get_db)) -> dict:
    """The page content; the default document is created on first read."""
    return ok(AboutService(db).get())


@router.put("")
def update_about(
    body: AboutUsUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    about = AboutService(db).update_all(body, admin)
    return ok(about, message="Página actualizada exitosamente")


# =============================================================================
# Sections
# =============================================================================


@router.put("/hero")
def update_hero(
    body: HeroUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(AboutService(db).update_hero(body, admin), message="Sección hero actualizada")


@router.put("/mission")
def update_mission(
    body: MissionUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(AboutService(db).update_mission(body, admin), message="Misión actualizada")


@router.put("/timeline")
def update_timeline(
    body: TimelineUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    timeline = AboutService(db).replace_list("timeline", body.timeline, admin)
    return ok(timeline, message="Timeline actualizado")


@router.put("/values")
def update_values(
    body: ValuesUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    values = AboutService(db).replace_list("values", body.values, admin)
    return ok(values, message="Valores actualizados")


@router.put("/team")
def update_team(
    body: TeamUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    team = AboutService(db).replace_list("team", body.team, admin)
    return ok(team, message="Equipo actualizado")


@router.put("/gallery")
def update_gallery(
    body: GalleryUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    gallery = AboutService(db).replace_list("gallery", body.gallery, admin)
    return ok(gallery, message="Galería actualizada")


@router.put("/cta")
def update_cta(
    body: CtaUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(AboutService(db).update_cta(body, admin), message="Llamado a la acción actualizado")


# =============================================================================
# Images
# =============================================================================


@router.post("/mission/image")
def upload_mission_image(
    image: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    with uploaded_image(_require_image(image), UploadFolders.ABOUT) as image_url:
        result = AboutService(db).set_mission_image(image_url, admin)
    return ok(result, message="Imagen subida exitosamente")


@router.post("/timeline/{index}/image")
def upload_timeline_image(
    index: int,
    image: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    with uploaded_image(_require_image(image), UploadFolders.ABOUT) as image_url:
        result = AboutService(db).set_entry_image("timeline", index, image_url, admin)
    return ok(result, message="Imagen subida exitosamente")


@router.post("/team/{index}/image")
def upload_team_image(
    index: int,
    image: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    with uploaded_image(_require_image(image), UploadFolders.ABOUT) as image_url:
        result = AboutService(db).set_entry_image("team", index, image_url, admin)
    return ok(result, message="Imagen subida exitosamente")


@router.post("/gallery/image")
def upload_gallery_image(
    image: UploadFile | None = File(default=None),
    caption: str | None = Form(default=None, max_length=200),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    with uploaded_image(_require_image(image), UploadFolders.ABOUT) as image_url:
        gallery = AboutService(db).add_gallery_image(image_url, caption, admin)
    return ok(gallery, message="Imagen agregada a la galería")


@router.delete("/gallery/{index}")
def delete_gallery_image(
    index: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    gallery = AboutService(db).delete_gallery_image(index, admin)
    return ok(gallery, message="Imagen eliminada de la galería")
