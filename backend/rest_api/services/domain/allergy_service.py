"""
Allergy Service - user allergen profiles and allergen detection.

Allergens are detected by keyword: an ingredient contains an allergen when
its lowercase name includes any keyword registered for that allergen.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Product, User, UserAllergy, utcnow
from rest_api.repositories import CartRepository
from shared.config.constants import ALLERGEN_KEYWORDS, AllergySeverity
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.schemas import AllergiesUpdateRequest, AllergyOutput

logger = get_logger(__name__)


def ingredients_with(allergen: str, ingredients: list[str]) -> list[str]:
    """Ingredients that reveal the given allergen."""
    keywords = ALLERGEN_KEYWORDS.get(allergen, [])
    return [
        ingredient for ingredient in ingredients
        if any(keyword in ingredient.lower() for keyword in keywords)
    ]


def detect_allergens(ingredients: list[str]) -> list[str]:
    """Allergens present in a list of ingredients, in keyword-table order."""
    return [
        allergen for allergen in ALLERGEN_KEYWORDS
        if ingredients_with(allergen, ingredients)
    ]


def match_user_allergies(
    allergies: list[UserAllergy],
    ingredients: list[str],
) -> list[dict[str, Any]]:
    """The user's allergies found in the ingredients, with the offending ingredients."""
    matches = []
    for allergy in allergies:
        found_in = ingredients_with(allergy.allergen, ingredients)
        if found_in:
            matches.append({
                "allergen": allergy.allergen,
                "severity": allergy.severity,
                "foundIn": found_in,
            })
    return matches


class AllergyService:
    """User allergy profile, safe-product listing and cart warnings."""

    def __init__(self, db: Session):
        self._db = db

    def list_allergies(self, user: User) -> list[AllergyOutput]:
        return [AllergyOutput.model_validate(a) for a in user.allergies]

    def replace_allergies(self, user: User, body: AllergiesUpdateRequest) -> list[AllergyOutput]:
        """Replace the user's allergy list as a whole."""
        user.allergies.clear()
        self._db.flush()
        now = utcnow()
        for allergy in body.allergies:
            user.allergies.append(
                UserAllergy(
                    allergen=allergy.allergen,
                    severity=allergy.severity or AllergySeverity.MEDIUM,
                    added_at=now,
                )
            )
        safe_commit(self._db)
        self._db.refresh(user)

        logger.info("Allergies updated", user_id=user.id, count=len(user.allergies))
        return self.list_allergies(user)

    def safe_products(self, user: User) -> dict[str, Any]:
        """Available products split by whether they contain the user's allergens."""
        products = self._db.execute(
            select(Product)
            .where(Product.available.is_(True), Product.is_active.is_(True))
            .order_by(Product.category, Product.name)
        ).scalars().all()

        safe, unsafe = [], []
        for product in products:
            summary = {
                "productId": product.id,
                "name": product.name,
                "price": product.price,
                "category": product.category,
                "imageUrl": product.image_url,
            }
            matched = [
                allergy.allergen for allergy in user.allergies
                if ingredients_with(allergy.allergen, product.ingredients or [])
            ]
            if matched:
                unsafe.append({**summary, "allergens": matched, "canBeCustomized": True})
            else:
                safe.append(summary)

        return {
            "safeProducts": safe,
            "unsafeProducts": unsafe,
            "stats": {
                "totalProducts": len(products),
                "safeCount": len(safe),
                "unsafeCount": len(unsafe),
            },
        }

    def check_product(self, user: User, product_id: int) -> dict[str, Any]:
        product = self._db.get(Product, product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Producto", product_id)

        matched = match_user_allergies(user.allergies, product.ingredients or [])
        is_safe = not matched
        suggestions = [
            f"Puedes pedir sin {ingredient} (elimina {match['allergen']})"
            for match in matched
            for ingredient in match["foundIn"]
        ]
        return {
            "productId": product.id,
            "productName": product.name,
            "isSafe": is_safe,
            "matchedAllergens": matched,
            "warning": None if is_safe else "⚠️ Este producto contiene alérgenos que has marcado como peligrosos",
            "canCustomize": True,
            "customizationSuggestions": suggestions,
        }

    def cart_warnings(self, session_id: str | None, user: User | None) -> dict[str, Any]:
        """Allergen matches for every line of the session's active cart."""
        if not session_id:
            raise ValidationError("Se requiere el ID de sesión")

        cart = CartRepository(self._db).find_active_by_session(session_id)
        if cart is None:
            raise NotFoundError("Carrito")

        allergies = user.allergies if user is not None else []
        warnings = []
        critical: list[str] = []
        for item in cart.items:
            ingredients = item.product.ingredients if item.product else []
            matched = match_user_allergies(allergies, ingredients or [])
            if not matched:
                continue
            warnings.append({
                "itemId": item.id,
                "productId": item.product_id,
                "productName": item.name,
                "allergens": matched,
            })
            for match in matched:
                if match["severity"] == AllergySeverity.HIGH and match["allergen"] not in critical:
                    critical.append(match["allergen"])

        has_warnings = bool(warnings)
        return {
            "hasWarnings": has_warnings,
            "warnings": warnings,
            "summary": {
                "totalItems": len(cart.items),
                "itemsWithWarnings": len(warnings),
                "criticalAllergens": critical,
            },
            "recommendation": (
                "⚠️ Tienes productos en tu carrito con alérgenos que has marcado. "
                "Revisa las personalizaciones antes de completar tu pedido."
                if has_warnings
                else "Tu carrito no contiene alérgenos que hayas marcado."
            ),
        }
