"""
Product Service - menu products and their customization pricing.

Usage:
    from rest_api.services.domain import ProductService

    service = ProductService(db)
    products = service.list_menu(category="Pizzas", available=True)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Product
from rest_api.repositories import ProductFilters, ProductRepository
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.domain.allergy_service import detect_allergens
from shared.config.constants import PRODUCT_EXTRAS
from shared.infrastructure.storage import delete_image
from shared.utils.shop_schemas import CustomPriceRequest, ProductOutput


class ProductService(BaseCRUDService[Product, ProductOutput]):
    """
    Service for menu products.

    Business rules:
    - price >= 0 and current_stock >= 0 (schema and table constraints)
    - A replaced image is removed from storage
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Product,
            output_schema=ProductOutput,
            entity_name="Producto",
            repository=ProductRepository(db),
        )

    def list_menu(
        self,
        *,
        category: str | None = None,
        available: bool | None = None,
    ) -> list[ProductOutput]:
        filters = ProductFilters(category=category, available=available)
        return self.list_all(filters, order_by=[Product.category, Product.name])

    def customization_options(self, product_id: int) -> dict[str, Any]:
        """Removable ingredients, addable extras and detected allergens of a product."""
        product = self.get_entity(product_id)
        ingredients = product.ingredients or []
        allergens = detect_allergens(ingredients)

        return {
            "productId": product.id,
            "productName": product.name,
            "basePrice": product.price,
            "removableIngredients": [{"name": name, "removable": True} for name in ingredients],
            "addableExtras": PRODUCT_EXTRAS,
            "detectedAllergens": allergens,
            "allergenWarnings": (
                f"Este producto contiene: {', '.join(allergens)}"
                if allergens
                else "No se detectaron alérgenos comunes"
            ),
        }

    def calculate_custom_price(self, product_id: int, body: CustomPriceRequest) -> dict[str, float]:
        """Base price plus extras; removing ingredients is free."""
        product = self.get_entity(product_id)
        extras_price = round(sum(extra.price for extra in body.added_extras), 2)
        removed_discount = 0.0
        return {
            "basePrice": round(product.price, 2),
            "removedIngredientsDiscount": removed_discount,
            "extrasPrice": extras_price,
            "totalPrice": round(product.price + extras_price - removed_discount, 2),
        }

    def _after_update(self, entity: Product, old_values: dict[str, Any], user_id: int | None) -> None:
        old_image = old_values.get("image_url")
        if old_image and old_image != entity.image_url:
            delete_image(old_image)
        super()._after_update(entity, old_values, user_id)
