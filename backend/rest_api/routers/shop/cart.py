"""
Cart router - /api/cart/*

Carts belong to a browser session (sessionId); a logged-in user is linked
to the cart when the session cookie or bearer token is present.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import ok, optional_user
from rest_api.services.domain import AllergyService, CartService
from shared.infrastructure.db import get_db
from shared.utils.shop_schemas import (
    CartAddRequest,
    CartItemTarget,
    CartSessionRequest,
    CartUpdateRequest,
)


router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.post("/get")
def get_cart(
    body: CartSessionRequest,
    db: Session = Depends(get_db),
    user: User | None = Depends(optional_user),
) -> dict:
    """Active cart of the session, created on first use."""
    return ok(CartService(db).get_or_create(body.session_id, user))


@router.post("/add")
def add_to_cart(
    body: CartAddRequest,
    db: Session = Depends(get_db),
    user: User | None = Depends(optional_user),
) -> dict:
    cart = CartService(db).add_item(body, user)
    return ok(cart, message="Producto agregado al carrito")


@router.put("/update")
def update_cart_item(body: CartUpdateRequest, db: Session = Depends(get_db)) -> dict:
    """Set a line's quantity; zero removes the line."""
    cart = CartService(db).update_item(body)
    return ok(cart, message="Carrito actualizado")


@router.delete("/remove")
def remove_cart_item(body: CartItemTarget, db: Session = Depends(get_db)) -> dict:
    cart = CartService(db).remove_item(body)
    return ok(cart, message="Producto eliminado del carrito")


@router.delete("/clear")
def clear_cart(body: CartSessionRequest, db: Session = Depends(get_db)) -> dict:
    cart = CartService(db).clear(body.session_id)
    return ok(cart, message="Carrito vaciado")


@router.get("/allergy-warnings")
def cart_allergy_warnings(
    session_id: str | None = Query(default=None, alias="sessionId"),
    db: Session = Depends(get_db),
    user: User | None = Depends(optional_user),
) -> dict:
    return ok(AllergyService(db).cart_warnings(session_id, user))
