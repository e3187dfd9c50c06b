"""
About Us Service - the singleton "Quiénes somos" document.

The document is created with default content the first time it is read.
Sections are JSON columns, so every change assigns a new value to the
column instead of mutating the loaded one.

Usage:
    from rest_api.services.domain import AboutService

    service = AboutService(db)
    about = service.get()
    hero = service.update_hero(body, editor=admin)
"""

from __future__ import annotations

import copy
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import AboutUs, User
from rest_api.services.base_service import BaseService
from shared.config.logging import get_logger
from shared.infrastructure.storage import delete_image
from shared.utils.content_schemas import (
    AboutUsOutput,
    AboutUsUpdate,
    CtaUpdate,
    HeroUpdate,
    MissionUpdate,
)
from shared.utils.exceptions import NotFoundError

logger = get_logger(__name__)

DEFAULT_ABOUT_US: dict[str, Any] = {
    "hero": {
        "title": "Nuestra Historia",
        "subtitle": (
            "Más de 30 años creando experiencias gastronómicas extraordinarias, "
            "una familia unida por la pasión de servir lo mejor."
        ),
        "stats": [
            {"value": "30+", "label": "Años de Experiencia"},
            {"value": "500K+", "label": "Clientes Satisfechos"},
            {"value": "50+", "label": "Empleados"},
            {"value": "5", "label": "Ubicaciones"},
        ],
    },
    "mission": {
        "title": "Nuestra Misión",
        "description": (
            "En Bocatto, nos dedicamos a crear momentos extraordinarios a través de sabores "
            "excepcionales. Combinamos técnicas culinarias tradicionales con innovación moderna "
            "para ofrecer una experiencia gastronómica que trasciende las expectativas."
        ),
        "image": "",
        "highlights": [
            {"text": "Ingredientes frescos seleccionados diariamente de proveedores locales"},
            {"text": "Recetas familiares transmitidas por generaciones"},
            {"text": "Atención personalizada que te hace sentir como en casa"},
            {"text": "Innovación constante sin perder nuestra identidad"},
        ],
    },
    "timeline": [
        {
            "year": "1995",
            "title": "Los Inicios",
            "description": (
                "Todo comenzó con una pequeña cocina familiar y un sueño: traer los sabores "
                "auténticos de la comida rápida gourmet a nuestra comunidad."
            ),
            "image": "",
        },
        {
            "year": "2010",
            "title": "Expansión",
            "description": (
                "Abrimos nuestro primer restaurante físico, manteniendo la calidad casera "
                "pero con un servicio profesional que nos caracteriza."
            ),
            "image": "",
        },
        {
            "year": "2020",
            "title": "Innovación Digital",
            "description": (
                "Nos adaptamos al mundo digital sin perder nuestra esencia, creando "
                "experiencias únicas para nuestros clientes."
            ),
            "image": "",
        },
        {
            "year": "2026",
            "title": "El Futuro",
            "description": (
                "Hoy somos más que un restaurante, somos una familia que conecta sabores, "
                "emociones y momentos especiales."
            ),
            "image": "",
        },
    ],
    "values": [
        {"icon": "❤️", "title": "Pasión", "description": "Cada plato es preparado con amor y dedicación."},
        {"icon": "🌱", "title": "Sostenibilidad", "description": "Trabajamos con proveedores locales y prácticas sustentables."},
        {"icon": "👨‍👩‍👧‍👦", "title": "Familia", "description": "Somos una gran familia que incluye a nuestro equipo y clientes."},
        {"icon": "🎯", "title": "Excelencia", "description": "Siempre buscamos la perfección en cada detalle."},
        {"icon": "🚀", "title": "Innovación", "description": "Fusionamos tradición con modernidad."},
        {"icon": "🤝", "title": "Compromiso", "description": "Nuestro compromiso es ofrecer la mejor calidad siempre."},
    ],
    "team": [
        {
            "name": "Carlos Rodriguez",
            "position": "Chef Ejecutivo",
            "description": "25 años de experiencia en cocina internacional",
            "specialty": "Cocina de Autor",
            "image": "",
        },
        {
            "name": "María González",
            "position": "Directora de Operaciones",
            "description": "Experta en gestión gastronómica",
            "specialty": "Gestión & Calidad",
            "image": "",
        },
        {
            "name": "Antonio Silva",
            "position": "Maestro Panadero",
            "description": "Especialista en panes artesanales",
            "specialty": "Panadería Artesanal",
            "image": "",
        },
        {
            "name": "Sofia Chen",
            "position": "Chef de Postres",
            "description": "Creadora de postres signature",
            "specialty": "Repostería Creativa",
            "image": "",
        },
    ],
    "gallery": [],
    "cta": {
        "title": "¿Listo para vivir la experiencia Bocatto?",
        "description": (
            "Ven y descubre por qué somos más que un restaurante. "
            "Somos el lugar donde los sabores se convierten en recuerdos."
        ),
    },
}

# Sections whose entries carry their own image
_IMAGE_SECTIONS: dict[str, str] = {
    "timeline": "Elemento de timeline",
    "team": "Miembro del equipo",
}


class AboutService(BaseService[AboutUs]):
    """Service for the About Us document; the last editor is recorded by email."""

    def __init__(self, db: Session):
        super().__init__(db, AboutUs)

    # =========================================================================
    # Read
    # =========================================================================

    def get_document(self) -> AboutUs:
        """Active document, created with the default content when missing."""
        about = self._db.scalar(
            select(AboutUs).where(AboutUs.is_active.is_(True)).order_by(AboutUs.id).limit(1)
        )
        if about is None:
            about = AboutUs(**copy.deepcopy(DEFAULT_ABOUT_US))
            self._db.add(about)
            self._commit("crear la página Quiénes somos", about)
            logger.info("Default About Us document created", about_id=about.id)
        return about

    def get(self) -> AboutUsOutput:
        return AboutUsOutput.model_validate(self.get_document())

    # =========================================================================
    # Whole document and sections
    # =========================================================================

    def update_all(self, body: AboutUsUpdate, editor: User) -> AboutUsOutput:
        about = self.get_document()
        for section, value in body.model_dump(exclude_none=True).items():
            setattr(about, section, value)
        self._save(about, editor, "todo")
        return AboutUsOutput.model_validate(about)

    def update_hero(self, body: HeroUpdate, editor: User) -> dict[str, Any]:
        about = self.get_document()
        about.hero = self._merge(about.hero, body.model_dump(exclude_none=True))
        self._save(about, editor, "hero")
        return about.hero

    def update_mission(self, body: MissionUpdate, editor: User) -> dict[str, Any]:
        about = self.get_document()
        about.mission = self._merge(about.mission, body.model_dump(exclude_none=True))
        self._save(about, editor, "mission")
        return about.mission

    def update_cta(self, body: CtaUpdate, editor: User) -> dict[str, Any]:
        about = self.get_document()
        about.cta = self._merge(about.cta, body.model_dump(exclude_none=True))
        self._save(about, editor, "cta")
        return about.cta

    def replace_list(self, section: str, items: list[Any], editor: User) -> list[dict[str, Any]]:
        """Replace one of the list sections (timeline, values, team, gallery)."""
        about = self.get_document()
        setattr(about, section, [item.model_dump() for item in items])
        self._save(about, editor, section)
        return getattr(about, section)

    # =========================================================================
    # Images
    # =========================================================================

    def set_mission_image(self, image_url: str, editor: User) -> dict[str, str]:
        about = self.get_document()
        mission = dict(about.mission or {})
        delete_image(mission.get("image"))
        mission["image"] = image_url
        about.mission = mission
        self._save(about, editor, "mission")
        return {"image": image_url}

    def set_entry_image(self, section: str, index: int, image_url: str, editor: User) -> dict[str, str]:
        """
        Set the image of a timeline entry or team member.

        Raises:
            NotFoundError: No entry at that index.
        """
        about = self.get_document()
        entries = copy.deepcopy(getattr(about, section) or [])
        if not 0 <= index < len(entries):
            raise NotFoundError(_IMAGE_SECTIONS[section], index)

        delete_image(entries[index].get("image"))
        entries[index]["image"] = image_url
        setattr(about, section, entries)
        self._save(about, editor, section)
        return {"image": image_url}

    def add_gallery_image(self, image_url: str, caption: str | None, editor: User) -> list[dict[str, Any]]:
        about = self.get_document()
        about.gallery = [*(about.gallery or []), {"image": image_url, "caption": caption or ""}]
        self._save(about, editor, "gallery")
        return about.gallery

    def delete_gallery_image(self, index: int, editor: User) -> list[dict[str, Any]]:
        """
        Raises:
            NotFoundError: No image at that index.
        """
        about = self.get_document()
        gallery = list(about.gallery or [])
        if not 0 <= index < len(gallery):
            raise NotFoundError("Imagen", index)

        removed = gallery.pop(index)
        about.gallery = gallery
        self._save(about, editor, "gallery")
        delete_image(removed.get("image"))
        return about.gallery

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _merge(current: dict[str, Any] | None, changes: dict[str, Any]) -> dict[str, Any]:
        merged = dict(current or {})
        # Empty strings keep the current text
        merged.update({k: v for k, v in changes.items() if v != ""})
        return merged

    def _save(self, about: AboutUs, editor: User, section: str) -> None:
        about.last_updated_by = editor.email
        about.set_updated_by(editor.id)
        self._commit(f"actualizar la sección {section}", about)
        logger.info("About Us updated", section=section, user_id=editor.id)
