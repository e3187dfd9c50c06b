"""
Tests for client administration and user allergy profiles.
"""

from tests.conftest import make_user


class TestClients:
    """Admin view of client accounts."""

    def test_list_clients_with_order_counts(self, client, admin_headers, client_user, other_user):
        response = client.get("/clients", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["pagination"]["limit"] == 10
        assert all(c["orderCount"] == 0 for c in body["data"])
        assert all(c["role"] == "client" for c in body["data"])

    def test_search_by_name_or_email(self, client, db_session, admin_headers, client_user):
        make_user(db_session, "pedro@correo.com", first_name="Pedro", last_name="Salas")
        response = client.get("/clients?search=pedro", headers=admin_headers)
        assert [c["email"] for c in response.json()["data"]] == ["pedro@correo.com"]

    def test_status_filter(self, client, db_session, admin_headers, client_user, other_user):
        other_user.is_active = False
        db_session.commit()
        response = client.get("/clients?status=inactive", headers=admin_headers)
        assert [c["id"] for c in response.json()["data"]] == [other_user.id]

    def test_deactivate_client(self, client, admin_headers, client_user):
        response = client.put(
            f"/clients/{client_user.id}/status", json={"isActive": False}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Cliente desactivado exitosamente"

        login = client.post(
            "/api/auth/client/login", json={"email": "ana@correo.com", "password": "secreto123"}
        )
        assert login.status_code == 403

    def test_status_requires_boolean(self, client, admin_headers, client_user):
        response = client.put(
            f"/clients/{client_user.id}/status", json={"isActive": "no"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_admins_are_not_clients(self, client, admin_user, admin_headers):
        response = client.get(f"/clients/{admin_user.id}", headers=admin_headers)
        assert response.status_code == 404

    def test_requires_admin(self, client, client_headers):
        assert client.get("/clients", headers=client_headers).status_code == 403


class TestAllergies:
    def test_replace_allergies(self, client, client_headers):
        response = client.post(
            "/api/users/me/allergies",
            json={"allergies": [{"allergen": "gluten"}, {"allergen": "Lactosa", "severity": "high"}]},
            headers=client_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["data"][0]["severity"] == "medium"
        assert body["data"][1]["allergen"] == "lactosa"

        response = client.post(
            "/api/users/me/allergies",
            json={"allergies": [{"allergen": "huevo"}]},
            headers=client_headers,
        )
        listed = client.get("/api/users/me/allergies", headers=client_headers).json()
        assert [a["allergen"] for a in listed["data"]] == ["huevo"]

    def test_unknown_allergen(self, client, client_headers):
        response = client.post(
            "/api/users/me/allergies",
            json={"allergies": [{"allergen": "kryptonita"}]},
            headers=client_headers,
        )
        assert response.status_code == 400

    def test_safe_products(self, client, db_session, client_headers, seed_product):
        client.post(
            "/api/users/me/allergies",
            json={"allergies": [{"allergen": "gluten"}]},
            headers=client_headers,
        )
        data = client.get("/api/users/me/safe-products", headers=client_headers).json()["data"]
        assert data["stats"] == {"totalProducts": 1, "safeCount": 0, "unsafeCount": 1}
        assert data["unsafeProducts"][0]["allergens"] == ["gluten"]

    def test_check_product(self, client, client_headers, seed_product):
        client.post(
            "/api/users/me/allergies",
            json={"allergies": [{"allergen": "lactosa", "severity": "high"}]},
            headers=client_headers,
        )
        data = client.post(
            f"/api/users/me/allergies/check-product/{seed_product.id}", headers=client_headers
        ).json()["data"]
        assert data["isSafe"] is False
        assert data["matchedAllergens"] == [
            {"allergen": "lactosa", "severity": "high", "foundIn": ["queso cheddar"]}
        ]
        assert data["customizationSuggestions"] == ["Puedes pedir sin queso cheddar (elimina lactosa)"]

    def test_check_product_without_allergies(self, client, client_headers, seed_product):
        data = client.post(
            f"/api/users/me/allergies/check-product/{seed_product.id}", headers=client_headers
        ).json()["data"]
        assert data["isSafe"] is True
        assert data["warning"] is None

    def test_requires_login(self, client):
        assert client.get("/api/users/me/allergies").status_code == 401
