"""
Tests for the menu, product customization and category endpoints.
"""

from rest_api.models import Product
from tests.conftest import FAKE_IMAGE_URL, PNG_BYTES


class TestMenu:
    """Public menu listing and admin product management."""

    def test_list_menu(self, client, seed_product):
        response = client.get("/api/menu")
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["data"][0]["name"] == "Hamburguesa Clásica"
        assert body["data"][0]["currentStock"] == 10

    def test_filter_by_category_is_case_insensitive(self, client, seed_product):
        assert client.get("/api/menu?category=hamburguesas").json()["count"] == 1
        assert client.get("/api/menu?category=Pizzas").json()["count"] == 0

    def test_filter_by_availability(self, client, db_session, seed_product):
        seed_product.available = False
        db_session.commit()
        assert client.get("/api/menu?available=true").json()["count"] == 0
        assert client.get("/api/menu?available=false").json()["count"] == 1

    def test_get_missing_product(self, client):
        response = client.get("/api/menu/999")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_create_product_with_json(self, client, admin_headers, seed_category):
        response = client.post(
            "/api/menu",
            json={
                "name": "Pizza Margarita",
                "price": 12.5,
                "category": "Pizzas",
                "ingredients": ["masa", "tomate", "mozzarella"],
                "currentStock": 5,
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["ingredients"] == ["masa", "tomate", "mozzarella"]
        assert data["imageUrl"] is None

    def test_create_product_multipart_with_image(self, client, admin_headers, uploads):
        response = client.post(
            "/api/menu",
            data={
                "name": "Ensalada César",
                "price": "8.90",
                "ingredients": "lechuga, crutones, queso parmesano",
                "currentStock": "3",
            },
            files={"image": ("ensalada.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["imageUrl"] == FAKE_IMAGE_URL
        assert data["ingredients"] == ["lechuga", "crutones", "queso parmesano"]
        assert uploads == ["bocatto/products"]

    def test_create_product_negative_price(self, client, admin_headers):
        response = client.post(
            "/api/menu", json={"name": "Gratis", "price": -1}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Error de validación"

    def test_create_product_requires_admin(self, client, client_headers):
        response = client.post(
            "/api/menu", json={"name": "Pizza", "price": 10}, headers=client_headers
        )
        assert response.status_code == 403

    def test_create_product_requires_login(self, client):
        response = client.post("/api/menu", json={"name": "Pizza", "price": 10})
        assert response.status_code == 401

    def test_update_product(self, client, db_session, admin_headers, seed_product):
        response = client.put(
            f"/api/menu/{seed_product.id}",
            json={"price": 11.5, "available": False},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 11.5
        assert data["available"] is False
        assert data["name"] == "Hamburguesa Clásica"

    def test_update_product_image_uploads_off_event_loop(
        self, client, admin_headers, seed_product, uploads
    ):
        response = client.put(
            f"/api/menu/{seed_product.id}",
            data={"price": "12"},
            files={"image": ("burger.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["imageUrl"] == FAKE_IMAGE_URL
        assert uploads == ["bocatto/products"]

    def test_update_missing_product_uploads_nothing(self, client, admin_headers, uploads):
        response = client.put(
            "/api/menu/999",
            data={"price": "5"},
            files={"image": ("x.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert uploads == []


class TestCustomization:
    def test_customization_options(self, client, seed_product):
        response = client.get(f"/api/products/{seed_product.id}/customization-options")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["basePrice"] == 10.0
        assert [i["name"] for i in data["removableIngredients"]] == seed_product.ingredients
        assert data["detectedAllergens"] == ["gluten", "lactosa"]
        assert data["allergenWarnings"] == "Este producto contiene: gluten, lactosa"
        assert {"name": "bacon", "price": 2.0} in data["addableExtras"]

    def test_calculate_custom_price(self, client, seed_product):
        response = client.post(
            f"/api/products/{seed_product.id}/calculate-custom-price",
            json={
                "removedIngredients": ["tomate"],
                "addedExtras": [{"name": "bacon", "price": 2.0}, {"name": "huevo", "price": 1.0}],
            },
        )
        assert response.status_code == 200
        assert response.json()["data"] == {
            "basePrice": 10.0,
            "removedIngredientsDiscount": 0.0,
            "extrasPrice": 3.0,
            "totalPrice": 13.0,
        }

    def test_custom_price_for_missing_product(self, client):
        response = client.post("/api/products/999/calculate-custom-price", json={})
        assert response.status_code == 404


class TestCategories:
    """Category management."""

    def test_list_includes_product_counts(self, client, seed_product):
        response = client.get("/categories")
        assert response.status_code == 200
        category = response.json()["data"][0]
        assert category["name"] == "Hamburguesas"
        assert category["productCount"] == 1

    def test_create_category_assigns_slug_and_order(self, client, admin_headers, seed_category):
        response = client.post(
            "/categories",
            json={"name": "Bebidas Frías", "icon": "🥤"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["slug"] == "bebidas-frias"
        assert data["displayOrder"] == 2

    def test_duplicate_name_is_case_insensitive(self, client, admin_headers, seed_category):
        response = client.post(
            "/categories", json={"name": "hamburguesas"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_rename_propagates_to_products(self, client, db_session, admin_headers, seed_product, seed_category):
        response = client.put(
            f"/categories/{seed_category.id}",
            json={"name": "Burgers"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        db_session.refresh(seed_product)
        assert seed_product.category == "Burgers"

    def test_delete_with_products_is_refused(self, client, admin_headers, seed_product, seed_category):
        response = client.delete(f"/categories/{seed_category.id}", headers=admin_headers)
        assert response.status_code == 400
        assert "1 productos" in response.json()["message"]

    def test_delete_empty_category(self, client, admin_headers, seed_category):
        response = client.delete(f"/categories/{seed_category.id}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"/categories/{seed_category.id}").status_code == 404

    def test_toggle_hides_from_active_listing(self, client, admin_headers, seed_category):
        response = client.patch(f"/categories/{seed_category.id}/toggle", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["isActive"] is False
        assert client.get("/categories?active_only=true").json()["data"] == []

    def test_reorder(self, client, admin_headers, seed_category):
        response = client.put(
            "/categories/reorder",
            json={"categories": [{"id": seed_category.id, "displayOrder": 7}]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"][0]["displayOrder"] == 7

    def test_reorder_unknown_category(self, client, admin_headers):
        response = client.put(
            "/categories/reorder",
            json={"categories": [{"id": 42, "displayOrder": 1}]},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_seed_refused_when_categories_exist(self, client, admin_headers, seed_category):
        response = client.post("/categories/seed", headers=admin_headers)
        assert response.status_code == 400

    def test_seed_and_reset(self, client, admin_headers):
        seeded = client.post("/categories/seed", headers=admin_headers)
        assert seeded.status_code == 201
        count = len(seeded.json()["data"])
        assert count > 0

        reset = client.post("/categories/reset", headers=admin_headers)
        assert reset.status_code == 200
        assert len(client.get("/categories").json()["data"]) == count


class TestProductModel:
    def test_products_default_to_active(self, db_session):
        product = Product(name="Agua", price=1.0)
        db_session.add(product)
        db_session.commit()
        assert product.is_active is True
        assert product.current_stock == 0
