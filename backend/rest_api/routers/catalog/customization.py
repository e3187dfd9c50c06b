"""
Product customization router - /api/products/*
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers._common import ok
from rest_api.services.domain import ProductService
from shared.infrastructure.db import get_db
from shared.utils.shop_schemas import CustomPriceRequest


router = APIRouter(prefix="/api/products", tags=["customization"])


@router.get("/{product_id}/customization-options")
def customization_options(product_id: int, db: Session = Depends(get_db)) -> dict:
    """Removable ingredients, extras and detected allergens."""
    return ok(ProductService(db).customization_options(product_id))


@router.post("/{product_id}/calculate-custom-price")
def calculate_custom_price(
    product_id: int,
    body: CustomPriceRequest,
    db: Session = Depends(get_db),
) -> dict:
    return ok(ProductService(db).calculate_custom_price(product_id, body))
