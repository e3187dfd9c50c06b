"""
Menu router - /api/menu/*
CLEAN-ARCH: Thin router delegating to ProductService.
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, Request, UploadFile, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import ok, parse_model, read_payload, require_admin, uploaded_image
from rest_api.services.domain import ProductService
from shared.config.constants import UploadFolders
from shared.infrastructure.db import get_db
from shared.utils.shop_schemas import ProductCreate, ProductOutput, ProductUpdate


router = APIRouter(prefix="/api/menu", tags=["menu"])


def _changes(body: ProductUpdate) -> dict[str, Any]:
    # Description may be cleared; required columns keep their value when null
    return {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in ("description", "category")
    }


# Upload and persistence block, so multipart handlers run them off the event loop
def _create_product(
    db: Session, body: ProductCreate, image: UploadFile | None, admin_id: int
) -> ProductOutput:
    with uploaded_image(image, UploadFolders.PRODUCTS) as image_url:
        data = body.model_dump()
        if image_url:
            data["image_url"] = image_url
        return ProductService(db).create(data, admin_id)


def _update_product(
    db: Session, product_id: int, body: ProductUpdate, image: UploadFile | None, admin_id: int
) -> ProductOutput:
    service = ProductService(db)
    service.get_entity(product_id)
    with uploaded_image(image, UploadFolders.PRODUCTS) as image_url:
        data = _changes(body)
        if image_url:
            data["image_url"] = image_url
        return service.update(product_id, data, admin_id)


@router.get("")
def list_menu(
    category: str | None = None,
    available: bool | None = None,
    db: Session = Depends(get_db),
) -> dict:
    """Public menu, optionally filtered by category and availability."""
    products = ProductService(db).list_menu(category=category, available=available)
    return ok(products, count=len(products))


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(ProductService(db).get_by_id(product_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    """Create a product; accepts multipart with an optional image."""
    fields, image = await read_payload(request)
    body = parse_model(ProductCreate, fields)
    product = await asyncio.to_thread(_create_product, db, body, image, admin.id)
    return ok(product, message="Producto creado exitosamente")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    fields, image = await read_payload(request)
    body = parse_model(ProductUpdate, fields)
    product = await asyncio.to_thread(_update_product, db, product_id, body, image, admin.id)
    return ok(product, message="Producto actualizado exitosamente")
