"""
Category router - /categories/*
CLEAN-ARCH: Thin router delegating to CategoryService.

Static paths (/reorder, /seed, /reset) are declared before /{category_id}.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import ok, require_admin
from rest_api.services.domain import CategoryService
from shared.infrastructure.db import get_db
from shared.utils.shop_schemas import CategoryCreate, CategoryReorderRequest, CategoryUpdate


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
def list_categories(active_only: bool = False, db: Session = Depends(get_db)) -> dict:
    categories = CategoryService(db).list_categories(active_only=active_only)
    return ok(categories, count=len(categories))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    category = CategoryService(db).create(body.model_dump(), admin.id)
    return ok(category, message="Categoría creada exitosamente")


@router.put("/reorder")
def reorder_categories(
    body: CategoryReorderRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    categories = CategoryService(db).reorder(body.categories, admin.id)
    return ok(categories, message="Categorías reordenadas exitosamente")


@router.post("/seed", status_code=status.HTTP_201_CREATED)
def seed_categories(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    categories = CategoryService(db).seed_defaults(admin.id)
    return ok(categories, message=f"{len(categories)} categorías creadas exitosamente", count=len(categories))


@router.post("/reset")
def reset_categories(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    """Delete every category and recreate the defaults."""
    categories = CategoryService(db).reset(admin.id)
    return ok(categories, message="Categorías restablecidas exitosamente", count=len(categories))


@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(CategoryService(db).get_category(category_id))


@router.put("/{category_id}")
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    changes = {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in ("description", "image_url")
    }
    category = CategoryService(db).update(category_id, changes, admin.id)
    return ok(category, message="Categoría actualizada exitosamente")


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    CategoryService(db).delete(category_id, admin.id)
    return ok(message="Categoría eliminada exitosamente")


@router.patch("/{category_id}/toggle")
def toggle_category(
    category_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    category = CategoryService(db).toggle_active(category_id, admin.id)
    state = "activada" if category.is_active else "desactivada"
    return ok(category, message=f"Categoría {state} exitosamente")
