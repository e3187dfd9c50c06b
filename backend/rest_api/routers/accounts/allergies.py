"""
Allergy profile router - /api/users/me/*
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import current_user, ok
from rest_api.services.domain import AllergyService
from shared.infrastructure.db import get_db
from shared.utils.schemas import AllergiesUpdateRequest


router = APIRouter(prefix="/api/users/me", tags=["allergies"])


@router.post("/allergies")
def update_allergies(
    body: AllergiesUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """Replace the user's allergy list."""
    allergies = AllergyService(db).replace_allergies(user, body)
    return ok(allergies, message="Alergias actualizadas exitosamente", count=len(allergies))


@router.get("/allergies")
def list_allergies(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    allergies = AllergyService(db).list_allergies(user)
    return ok(allergies, count=len(allergies))


@router.get("/safe-products")
def safe_products(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    return ok(AllergyService(db).safe_products(user))


@router.post("/allergies/check-product/{product_id}")
def check_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    return ok(AllergyService(db).check_product(user, product_id))
