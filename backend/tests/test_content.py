"""
Tests for reviews, locations, offers, contact messages and the About Us page.
"""

from datetime import timedelta

import pytest

from rest_api.models import Reservation, utcnow
from shared.config.constants import ReservationStatus
from tests.conftest import FAKE_IMAGE_URL, PNG_BYTES


# =============================================================================
# Reviews
# =============================================================================


def _delivered_order(client, headers, admin_headers, product_id) -> dict:
    client.post(
        "/api/cart/add",
        json={"sessionId": "review-session", "productId": product_id, "quantity": 1},
    )
    order = client.post(
        "/api/orders",
        json={"sessionId": "review-session", "deliveryType": "dine-in", "paymentMethod": "cash"},
        headers=headers,
    ).json()["data"]
    client.put(f"/api/orders/{order['id']}/status", json={"status": "delivered"}, headers=admin_headers)
    return order


def _review(client, headers, review_type, target_id, stars=5, **extra):
    return client.post(
        "/reviews",
        json={
            "type": review_type,
            "targetId": target_id,
            "stars": stars,
            "comment": "Excelente comida y atención",
            **extra,
        },
        headers=headers,
    )


class TestReviews:
    def test_review_requires_a_delivered_purchase(self, client, client_headers, seed_product):
        response = _review(client, client_headers, "product", seed_product.id)
        assert response.status_code == 403

    def test_product_review_moderation(self, client, client_headers, admin_headers, seed_product):
        _delivered_order(client, client_headers, admin_headers, seed_product.id)

        created = _review(client, client_headers, "product", seed_product.id, stars=4)
        assert created.status_code == 201
        review = created.json()["data"]
        assert review["isApproved"] is False

        public = client.get(f"/reviews/product/{seed_product.id}").json()["data"]
        assert public["totalReviews"] == 0

        pending = client.get("/reviews/pending", headers=admin_headers).json()
        assert pending["count"] == 1

        client.patch(f"/reviews/{review['id']}/approve", headers=admin_headers)
        public = client.get(f"/reviews/product/{seed_product.id}").json()["data"]
        assert public["totalReviews"] == 1
        assert public["averageRating"] == 4.0
        assert public["reviews"][0]["user"]["firstName"] == "Ana"

    def test_duplicate_review(self, client, client_headers, admin_headers, seed_product):
        _delivered_order(client, client_headers, admin_headers, seed_product.id)
        _review(client, client_headers, "product", seed_product.id)
        response = _review(client, client_headers, "product", seed_product.id)
        assert response.status_code == 400
        assert response.json()["message"] == "Ya has dejado una reseña para este elemento"

    def test_order_review_checks_order_number(self, client, client_headers, admin_headers, seed_product):
        order = _delivered_order(client, client_headers, admin_headers, seed_product.id)
        wrong = _review(client, client_headers, "order", order["id"], orderNumber="ORD-999999")
        assert wrong.status_code == 403
        right = _review(client, client_headers, "order", order["id"], orderNumber=order["orderNumber"])
        assert right.status_code == 201

    def test_reservation_review_after_it_ended(self, client, db_session, client_user, client_headers, seed_area):
        now = utcnow()
        reservation = Reservation(
            user_id=client_user.id,
            area_id=seed_area.id,
            start_time=now - timedelta(hours=4),
            end_time=now - timedelta(hours=2),
            total_price=7.5,
            status=ReservationStatus.PAID,
            guest_count=4,
        )
        db_session.add(reservation)
        db_session.commit()

        response = _review(client, client_headers, "reservation", reservation.id)
        assert response.status_code == 201

    def test_edit_sends_review_back_to_moderation(self, client, client_headers, admin_headers, seed_product):
        _delivered_order(client, client_headers, admin_headers, seed_product.id)
        review_id = _review(client, client_headers, "product", seed_product.id).json()["data"]["id"]
        client.patch(f"/reviews/{review_id}/approve", headers=admin_headers)

        response = client.put(f"/reviews/{review_id}", json={"stars": 3}, headers=client_headers)
        assert response.status_code == 200
        assert response.json()["data"]["stars"] == 3
        assert response.json()["data"]["isApproved"] is False

    def test_only_author_edits(self, client, client_headers, other_headers, admin_headers, seed_product):
        _delivered_order(client, client_headers, admin_headers, seed_product.id)
        review_id = _review(client, client_headers, "product", seed_product.id).json()["data"]["id"]
        response = client.put(f"/reviews/{review_id}", json={"stars": 1}, headers=other_headers)
        assert response.status_code == 403

    def test_reject_and_respond(self, client, client_headers, admin_headers, seed_product):
        _delivered_order(client, client_headers, admin_headers, seed_product.id)
        review_id = _review(client, client_headers, "product", seed_product.id).json()["data"]["id"]

        answered = client.post(
            f"/reviews/{review_id}/respond", json={"response": "¡Gracias por visitarnos!"}, headers=admin_headers
        ).json()["data"]
        assert answered["adminResponse"] == "¡Gracias por visitarnos!"

        rejected = client.patch(f"/reviews/{review_id}/reject", headers=admin_headers).json()["data"]
        assert rejected["isVisible"] is False
        assert client.get("/reviews/pending", headers=admin_headers).json()["count"] == 0

    def test_my_reviews_and_delete(self, client, client_headers, admin_headers, seed_product):
        _delivered_order(client, client_headers, admin_headers, seed_product.id)
        review_id = _review(client, client_headers, "product", seed_product.id).json()["data"]["id"]
        assert client.get("/reviews/my-reviews", headers=client_headers).json()["count"] == 1

        assert client.delete(f"/reviews/{review_id}", headers=client_headers).status_code == 200
        assert client.get(f"/reviews/{review_id}").status_code == 404

    def test_short_comment(self, client, client_headers, seed_product):
        response = client.post(
            "/reviews",
            json={"type": "product", "targetId": seed_product.id, "stars": 5, "comment": "   bueno   "},
            headers=client_headers,
        )
        assert response.status_code == 400


# =============================================================================
# Locations
# =============================================================================


LOCATION = {
    "name": "Bocatto Centro",
    "address": "Av. Amazonas N24-155 y Colón",
    "city": "Quito",
    "phone": "+593 2 255 0000",
    "lat": -0.2063,
    "lng": -78.4961,
}


class TestLocations:
    def test_create_with_defaults(self, client, admin_headers):
        response = client.post("/locations", json=LOCATION, headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["coordinates"] == {"lat": -0.2063, "lng": -78.4961}
        assert data["openingHours"]["monday"] == "09:00 - 22:00"

    def test_create_multipart_with_image(self, client, admin_headers, uploads):
        fields = {key: str(value) for key, value in LOCATION.items()}
        fields["openingHours"] = '{"sunday": "Cerrado"}'
        response = client.post(
            "/locations",
            data=fields,
            files={"image": ("local.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["imageUrl"] == FAKE_IMAGE_URL
        assert data["openingHours"]["sunday"] == "Cerrado"

    def test_invalid_latitude(self, client, admin_headers):
        response = client.post("/locations", json={**LOCATION, "lat": 120}, headers=admin_headers)
        assert response.status_code == 400

    def test_flagship_first_and_city_filter(self, client, admin_headers):
        client.post("/locations", json=LOCATION, headers=admin_headers)
        client.post(
            "/locations",
            json={**LOCATION, "name": "Bocatto Guayaquil", "city": "Guayaquil", "isFlagship": True},
            headers=admin_headers,
        )
        names = [loc["name"] for loc in client.get("/locations").json()["data"]]
        assert names == ["Bocatto Guayaquil", "Bocatto Centro"]
        assert client.get("/locations?city=quito").json()["count"] == 1

    def test_soft_delete_and_toggle(self, client, admin_headers):
        location_id = client.post("/locations", json=LOCATION, headers=admin_headers).json()["data"]["id"]
        client.delete(f"/locations/{location_id}", headers=admin_headers)
        assert client.get("/locations?active_only=true").json()["count"] == 0

        toggled = client.patch(f"/locations/{location_id}/toggle", headers=admin_headers)
        assert toggled.json()["data"]["isActive"] is True

    def test_update_can_clear_email(self, client, admin_headers):
        location_id = client.post(
            "/locations", json={**LOCATION, "email": "centro@bocatto.com"}, headers=admin_headers
        ).json()["data"]["id"]
        response = client.put(f"/locations/{location_id}", json={"email": None}, headers=admin_headers)
        assert response.json()["data"]["email"] is None


# =============================================================================
# Offers
# =============================================================================


def _offer_payload(**overrides):
    now = utcnow()
    payload = {
        "name": "Combo Familiar",
        "description": "Dos pizzas grandes y bebidas",
        "items": [{"name": "Pizza grande", "quantity": 2}],
        "originalPrice": 40,
        "offerPrice": 30,
        "startDate": (now - timedelta(days=1)).isoformat(),
        "endDate": (now + timedelta(days=7)).isoformat(),
    }
    payload.update(overrides)
    return payload


class TestOffers:
    def test_create_offer_derives_discount(self, client, admin_headers):
        response = client.post("/offers", json=_offer_payload(), headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["discount"] == 25
        assert data["active"] is True
        assert data["badge"] == {"text": "Oferta", "color": "red", "icon": "🔥"}
        assert data["isCurrentlyValid"] is True

    def test_offer_price_must_be_lower(self, client, admin_headers):
        response = client.post("/offers", json=_offer_payload(offerPrice=40), headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Error de validación"

    def test_multipart_offer_with_json_fields(self, client, admin_headers, uploads):
        payload = _offer_payload()
        fields = {
            "name": payload["name"],
            "description": payload["description"],
            "items": '[{"name": "Pizza grande", "quantity": 2}]',
            "validDays": '["sábado", "domingo"]',
            "originalPrice": "40",
            "offerPrice": "30",
            "startDate": payload["startDate"],
            "endDate": payload["endDate"],
        }
        response = client.post(
            "/offers",
            data=fields,
            files={"image": ("combo.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["validDays"] == ["sábado", "domingo"]
        assert uploads == ["bocatto/offers"]

    def test_partial_update_rechecks_prices(self, client, admin_headers):
        offer_id = client.post("/offers", json=_offer_payload(), headers=admin_headers).json()["data"]["id"]
        response = client.put(f"/offers/{offer_id}", json={"originalPrice": 25}, headers=admin_headers)
        assert response.status_code == 400

        response = client.put(f"/offers/{offer_id}", json={"offerPrice": 20}, headers=admin_headers)
        assert response.json()["data"]["discount"] == 50

    def test_delete_removes_image(self, client, admin_headers, uploads, monkeypatch):
        removed = []
        monkeypatch.setattr("rest_api.services.domain.offer_service.delete_image", removed.append)

        offer_id = client.post(
            "/offers",
            data={
                "name": "Combo Pareja",
                "description": "Dos hamburguesas",
                "originalPrice": "20",
                "offerPrice": "15",
                "startDate": _offer_payload()["startDate"],
                "endDate": _offer_payload()["endDate"],
            },
            files={"image": ("pareja.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        ).json()["data"]["id"]

        assert client.delete(f"/offers/{offer_id}", headers=admin_headers).status_code == 200
        assert removed == [FAKE_IMAGE_URL]
        assert client.get(f"/offers/{offer_id}").status_code == 404


# =============================================================================
# Contact
# =============================================================================


CONTACT = {
    "name": "María López",
    "email": "maria@correo.com",
    "message": "Quisiera reservar el salón para un cumpleaños.",
}


class TestContact:
    def test_submit_is_public(self, client):
        response = client.post("/api/contact", json=CONTACT, headers={"User-Agent": "pytest"})
        assert response.status_code == 201
        assert set(response.json()["data"]) == {"id"}

    def test_short_message(self, client):
        response = client.post("/api/contact", json={**CONTACT, "message": "Hola"})
        assert response.status_code == 400

    def test_admin_listing_and_unread_count(self, client, admin_headers):
        client.post("/api/contact", json=CONTACT)
        client.post("/api/contact", json=CONTACT)

        body = client.get("/api/contact", headers=admin_headers).json()
        assert body["unreadCount"] == 2
        assert body["pagination"]["totalCount"] == 2
        assert body["data"][0]["userAgent"] == "testclient"

    def test_opening_marks_as_read(self, client, admin_headers):
        message_id = client.post("/api/contact", json=CONTACT).json()["data"]["id"]
        opened = client.get(f"/api/contact/{message_id}", headers=admin_headers).json()["data"]
        assert opened["status"] == "read"
        assert client.get("/api/contact", headers=admin_headers).json()["unreadCount"] == 0

    def test_respond_stamps_admin(self, client, admin_user, admin_headers):
        message_id = client.post("/api/contact", json=CONTACT).json()["data"]["id"]
        response = client.patch(
            f"/api/contact/{message_id}/status",
            json={"status": "responded", "adminNotes": "Llamada realizada"},
            headers=admin_headers,
        )
        data = response.json()["data"]
        assert data["respondedBy"] == admin_user.id
        assert data["adminNotes"] == "Llamada realizada"

    def test_stats(self, client, admin_headers):
        client.post("/api/contact", json=CONTACT)
        data = client.get("/api/contact/stats", headers=admin_headers).json()["data"]
        assert data["totalMessages"] == 1
        assert data["messagesByStatus"]["new"] == 1
        assert data["recentMessages"]["count"] == 1

    def test_delete(self, client, admin_headers):
        message_id = client.post("/api/contact", json=CONTACT).json()["data"]["id"]
        assert client.delete(f"/api/contact/{message_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/contact/{message_id}", headers=admin_headers).status_code == 404

    def test_listing_requires_admin(self, client, client_headers):
        assert client.get("/api/contact", headers=client_headers).status_code == 403


# =============================================================================
# About Us
# =============================================================================


class TestAbout:
    def test_default_document_is_created(self, client):
        response = client.get("/api/about")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["hero"]["title"]
        assert len(data["timeline"]) > 0
        assert data["gallery"] == []

    def test_hero_update_keeps_empty_fields(self, client, admin_headers):
        original = client.get("/api/about").json()["data"]["hero"]
        response = client.put(
            "/api/about/hero", json={"title": "Nuestra historia", "subtitle": ""}, headers=admin_headers
        )
        hero = response.json()["data"]
        assert hero["title"] == "Nuestra historia"
        assert hero["subtitle"] == original["subtitle"]

    def test_replace_values(self, client, admin_headers):
        response = client.put(
            "/api/about/values",
            json={"values": [{"title": "Calidad", "description": "Ingredientes frescos"}]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"] == [
            {"icon": "❤️", "title": "Calidad", "description": "Ingredientes frescos"}
        ]

    def test_gallery_images(self, client, admin_headers, uploads):
        response = client.post(
            "/api/about/gallery/image",
            data={"caption": "Nuestro salón"},
            files={"image": ("salon.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"] == [{"image": FAKE_IMAGE_URL, "caption": "Nuestro salón"}]

        response = client.delete("/api/about/gallery/0", headers=admin_headers)
        assert response.json()["data"] == []

        response = client.delete("/api/about/gallery/0", headers=admin_headers)
        assert response.status_code == 404

    def test_image_is_required(self, client, admin_headers):
        response = client.post("/api/about/mission/image", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No se proporcionó ninguna imagen"

    def test_team_image_out_of_range(self, client, admin_headers, uploads, monkeypatch):
        removed = []
        monkeypatch.setattr("rest_api.routers._common.forms.delete_image", removed.append)
        response = client.post(
            "/api/about/team/99/image",
            files={"image": ("chef.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert removed == [FAKE_IMAGE_URL]

    def test_timeline_image(self, client, admin_headers, uploads):
        response = client.post(
            "/api/about/timeline/0/image",
            files={"image": ("2010.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 200
        timeline = client.get("/api/about").json()["data"]["timeline"]
        assert timeline[0]["image"] == FAKE_IMAGE_URL

    def test_updates_require_admin(self, client, client_headers):
        response = client.put("/api/about/cta", json={"title": "Visítanos"}, headers=client_headers)
        assert response.status_code == 403

    @pytest.mark.parametrize("section", ["timeline", "team", "gallery"])
    def test_list_sections_validate_entries(self, client, admin_headers, section):
        response = client.put(f"/api/about/{section}", json={section: [{}]}, headers=admin_headers)
        assert response.status_code == 400
