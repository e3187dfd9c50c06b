"""
Tests for the cart, checkout, orders and coupons.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from rest_api.models import Cart, Coupon, CouponUsage, utcnow
from rest_api.services.domain import CouponService
from shared.config.constants import CartStatus, DiscountType
from shared.utils.exceptions import ValidationError


SESSION = "sess-abc123"


def _add(client, product_id, quantity=1, headers=None, session=SESSION, **extra):
    return client.post(
        "/api/cart/add",
        json={"sessionId": session, "productId": product_id, "quantity": quantity, **extra},
        headers=headers or {},
    )


def _checkout(client, headers, **extra):
    return client.post(
        "/api/orders",
        json={"sessionId": SESSION, "deliveryType": "pickup", "paymentMethod": "card", **extra},
        headers=headers,
    )


def _window(days_before=1, days_after=30):
    now = utcnow()
    return (now - timedelta(days=days_before)).isoformat(), (now + timedelta(days=days_after)).isoformat()


@pytest.fixture
def coupon(db_session, admin_user):
    now = utcnow()
    coupon = Coupon(
        code="BOCATTO10",
        description="10% de descuento",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=10,
        min_purchase=15,
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=30),
        usage_per_user=1,
    )
    db_session.add(coupon)
    db_session.commit()
    db_session.refresh(coupon)
    return coupon


class TestCart:
    """Anonymous and authenticated carts keyed by session id."""

    def test_get_creates_empty_cart(self, client):
        response = client.post("/api/cart/get", json={"sessionId": SESSION})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["totalPrice"] == 0
        assert data["ivaRate"] == 0.15

    def test_add_reserves_stock(self, client, db_session, seed_product):
        response = _add(client, seed_product.id, quantity=2)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalItems"] == 2
        assert data["subtotal"] == 20.0
        assert data["ivaAmount"] == 3.0
        assert data["totalPrice"] == 23.0

        db_session.refresh(seed_product)
        assert seed_product.current_stock == 8

    def test_same_customization_merges_lines(self, client, seed_product):
        _add(client, seed_product.id)
        response = _add(client, seed_product.id)
        items = response.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["quantity"] == 2

    def test_different_customization_adds_line(self, client, seed_product):
        _add(client, seed_product.id)
        response = _add(
            client,
            seed_product.id,
            customizations={"removedIngredients": ["tomate"]},
        )
        items = response.json()["data"]["items"]
        assert len(items) == 2
        assert items[1]["customizations"]["removedIngredients"] == ["tomate"]

    def test_insufficient_stock(self, client, seed_product):
        response = _add(client, seed_product.id, quantity=11)
        assert response.status_code == 400
        assert response.json()["data"] == {"availableStock": 10}

    def test_unavailable_product(self, client, db_session, seed_product):
        seed_product.available = False
        db_session.commit()
        assert _add(client, seed_product.id).status_code == 400

    def test_zero_quantity_is_rejected_on_add(self, client, seed_product):
        assert _add(client, seed_product.id, quantity=0).status_code == 400

    def test_update_quantity_adjusts_stock(self, client, db_session, seed_product):
        _add(client, seed_product.id, quantity=2)
        response = client.put(
            "/api/cart/update",
            json={"sessionId": SESSION, "productId": seed_product.id, "quantity": 5},
        )
        assert response.status_code == 200
        db_session.refresh(seed_product)
        assert seed_product.current_stock == 5

    def test_update_to_zero_removes_line(self, client, db_session, seed_product):
        item_id = _add(client, seed_product.id, quantity=2).json()["data"]["items"][0]["id"]
        response = client.put(
            "/api/cart/update",
            json={"sessionId": SESSION, "itemId": item_id, "quantity": 0},
        )
        assert response.json()["data"]["items"] == []
        db_session.refresh(seed_product)
        assert seed_product.current_stock == 10

    def test_negative_quantity(self, client, seed_product):
        _add(client, seed_product.id)
        response = client.put(
            "/api/cart/update",
            json={"sessionId": SESSION, "productId": seed_product.id, "quantity": -1},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "La cantidad no puede ser negativa"

    def test_remove_and_clear(self, client, db_session, seed_product):
        _add(client, seed_product.id, quantity=3)
        response = client.request(
            "DELETE",
            "/api/cart/remove",
            json={"sessionId": SESSION, "productId": seed_product.id},
        )
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

        _add(client, seed_product.id, quantity=1)
        response = client.request("DELETE", "/api/cart/clear", json={"sessionId": SESSION})
        assert response.status_code == 200
        db_session.refresh(seed_product)
        assert seed_product.current_stock == 10

    def test_update_unknown_cart(self, client):
        response = client.put(
            "/api/cart/update",
            json={"sessionId": "missing", "productId": 1, "quantity": 1},
        )
        assert response.status_code == 404

    def test_expired_cart_is_abandoned_and_stock_released(self, client, db_session, seed_product):
        first = _add(client, seed_product.id, quantity=3).json()["data"]
        db_session.refresh(seed_product)
        assert seed_product.current_stock == 7

        cart = db_session.scalar(select(Cart).where(Cart.id == first["id"]))
        cart.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = client.post("/api/cart/get", json={"sessionId": SESSION})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] != first["id"]
        assert data["items"] == []

        db_session.refresh(cart)
        db_session.refresh(seed_product)
        assert cart.status == CartStatus.ABANDONED
        assert seed_product.current_stock == 10


class TestCartAllergyWarnings:
    def test_warnings_for_user_allergies(self, client, client_headers, seed_product):
        client.post(
            "/api/users/me/allergies",
            json={"allergies": [{"allergen": "lactosa", "severity": "high"}]},
            headers=client_headers,
        )
        _add(client, seed_product.id, headers=client_headers)

        response = client.get(f"/api/cart/allergy-warnings?sessionId={SESSION}", headers=client_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["hasWarnings"] is True
        assert data["warnings"][0]["allergens"][0]["foundIn"] == ["queso cheddar"]
        assert data["summary"]["criticalAllergens"] == ["lactosa"]

    def test_anonymous_cart_has_no_warnings(self, client, seed_product):
        _add(client, seed_product.id)
        data = client.get(f"/api/cart/allergy-warnings?sessionId={SESSION}").json()["data"]
        assert data["hasWarnings"] is False

    def test_session_id_is_required(self, client):
        response = client.get("/api/cart/allergy-warnings")
        assert response.status_code == 400


class TestCheckout:
    def test_checkout_creates_order(self, client, client_headers, seed_product):
        _add(client, seed_product.id, quantity=2)
        response = _checkout(client, client_headers, customerNotes="Sin cebolla")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["orderNumber"] == f"ORD-{data['id']:06d}"
        assert data["status"] == "pending"
        assert data["paymentStatus"] == "pending"
        assert data["subtotal"] == 20.0
        assert data["totalPrice"] == 23.0
        assert data["customerEmail"] == "ana@correo.com"
        assert data["items"][0]["quantity"] == 2

        cart = client.post("/api/cart/get", json={"sessionId": SESSION}).json()["data"]
        assert cart["items"] == []

    def test_empty_cart(self, client, client_headers):
        response = _checkout(client, client_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "El carrito está vacío. Agrega productos antes de pagar"

    def test_checkout_with_coupon(self, client, db_session, client_headers, seed_product, coupon):
        _add(client, seed_product.id, quantity=2)
        response = _checkout(client, client_headers, couponCode="bocatto10")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["couponCode"] == "BOCATTO10"
        assert data["subtotalBeforeDiscount"] == 20.0
        assert data["couponDiscount"] == 2.0
        assert data["subtotal"] == 18.0
        assert data["ivaAmount"] == 2.7
        assert data["totalPrice"] == 20.7

        db_session.refresh(coupon)
        assert coupon.usage_count == 1

    def test_coupon_below_minimum_purchase(self, client, client_headers, seed_product, coupon):
        _add(client, seed_product.id, quantity=1)
        response = _checkout(client, client_headers, couponCode="BOCATTO10")
        assert response.status_code == 400
        assert response.json()["message"] == "El pedido mínimo para este cupón es $15.00"

    def test_coupon_once_per_user(self, client, client_headers, seed_product, coupon):
        _add(client, seed_product.id, quantity=2)
        assert _checkout(client, client_headers, couponCode="BOCATTO10").status_code == 201

        _add(client, seed_product.id, quantity=2)
        response = _checkout(client, client_headers, couponCode="BOCATTO10")
        assert response.status_code == 400
        assert response.json()["message"] == "Ya has usado este cupón el máximo de veces permitido"


class TestOrders:
    def _order(self, client, headers, product_id, quantity=2):
        _add(client, product_id, quantity=quantity)
        return _checkout(client, headers).json()["data"]

    def test_my_orders_and_access(self, client, client_headers, other_headers, admin_headers, seed_product):
        order = self._order(client, client_headers, seed_product.id)
        mine = client.get("/api/orders/my-orders", headers=client_headers).json()
        assert mine["count"] == 1

        assert client.get(f"/api/orders/{order['id']}", headers=other_headers).status_code == 403
        assert client.get(f"/api/orders/{order['id']}", headers=admin_headers).status_code == 200

    def test_admin_listing_is_paginated(self, client, client_headers, admin_headers, seed_product):
        self._order(client, client_headers, seed_product.id, quantity=1)
        response = client.get("/api/orders?page=1&limit=10", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {
            "currentPage": 1,
            "totalPages": 1,
            "totalCount": 1,
            "limit": 10,
            "hasNextPage": False,
            "hasPrevPage": False,
        }

    def test_status_flow_and_kitchen_queue(self, client, client_headers, admin_headers, seed_product):
        order = self._order(client, client_headers, seed_product.id)

        confirmed = client.put(
            f"/api/orders/{order['id']}/status",
            json={"status": "confirmed", "staffNotes": "Mesa 4"},
            headers=admin_headers,
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["data"]["staffNotes"] == "Mesa 4"

        kitchen = client.get("/api/orders/kitchen/active", headers=admin_headers).json()
        assert [o["id"] for o in kitchen["data"]] == [order["id"]]

        delivered = client.put(
            f"/api/orders/{order['id']}/status", json={"status": "delivered"}, headers=admin_headers
        ).json()["data"]
        assert delivered["paymentStatus"] == "paid"
        assert delivered["completedAt"] is not None

        final = client.put(
            f"/api/orders/{order['id']}/status", json={"status": "preparing"}, headers=admin_headers
        )
        assert final.status_code == 400

    def test_kitchen_queue_requires_admin(self, client, client_headers):
        assert client.get("/api/orders/kitchen/active", headers=client_headers).status_code == 403

    def test_invalid_status(self, client, client_headers, admin_headers, seed_product):
        order = self._order(client, client_headers, seed_product.id)
        response = client.put(
            f"/api/orders/{order['id']}/status", json={"status": "lost"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_cancel_restores_stock(self, client, db_session, client_headers, seed_product):
        order = self._order(client, client_headers, seed_product.id, quantity=3)
        db_session.refresh(seed_product)
        assert seed_product.current_stock == 7

        response = client.request(
            "DELETE",
            f"/api/orders/{order['id']}",
            json={"reason": "Me equivoqué"},
            headers=client_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "cancelled"
        assert data["cancellationReason"] == "Me equivoqué"

        db_session.refresh(seed_product)
        assert seed_product.current_stock == 10

    def test_cannot_cancel_once_preparing(self, client, client_headers, admin_headers, seed_product):
        order = self._order(client, client_headers, seed_product.id)
        client.put(f"/api/orders/{order['id']}/status", json={"status": "preparing"}, headers=admin_headers)
        response = client.delete(f"/api/orders/{order['id']}", headers=client_headers)
        assert response.status_code == 400

    def test_other_user_cannot_cancel(self, client, client_headers, other_headers, seed_product):
        order = self._order(client, client_headers, seed_product.id)
        response = client.delete(f"/api/orders/{order['id']}", headers=other_headers)
        assert response.status_code == 403


class TestCoupons:
    def _payload(self, **overrides):
        start, end = _window()
        payload = {
            "code": "verano20",
            "description": "Descuento de verano",
            "discountType": "percentage",
            "discountValue": 20,
            "maxDiscount": 5,
            "startDate": start,
            "endDate": end,
        }
        payload.update(overrides)
        return payload

    def test_create_uppercases_code(self, client, admin_headers):
        response = client.post("/coupons", json=self._payload(), headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["code"] == "VERANO20"
        assert data["isCurrentlyValid"] is True

    def test_duplicate_code(self, client, admin_headers, coupon):
        response = client.post("/coupons", json=self._payload(code="BOCATTO10"), headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Ya existe un cupón con este código"

    def test_percentage_over_one_hundred(self, client, admin_headers):
        response = client.post("/coupons", json=self._payload(discountValue=150), headers=admin_headers)
        assert response.status_code == 400

    def test_validate_caps_percentage_discount(self, client, admin_headers, client_headers):
        client.post("/coupons", json=self._payload(), headers=admin_headers)
        response = client.post(
            "/coupons/validate", json={"code": "VERANO20", "cartTotal": 100}, headers=client_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["discount"] == 5.0
        assert data["finalTotal"] == 95.0

    def test_fixed_discount_never_exceeds_total(self, client, admin_headers, client_headers):
        client.post(
            "/coupons",
            json=self._payload(code="MENOS50", discountType="fixed", discountValue=50, maxDiscount=None),
            headers=admin_headers,
        )
        response = client.post(
            "/coupons/validate", json={"code": "MENOS50", "cartTotal": 30}, headers=client_headers
        )
        assert response.json()["data"]["finalTotal"] == 0

    @pytest.mark.parametrize(
        "days_before,days_after,message",
        [
            (-2, 10, "Este cupón aún no está vigente"),
            (10, -2, "Este cupón ha expirado"),
        ],
    )
    def test_validate_outside_dates(self, client, db_session, client_headers, days_before, days_after, message):
        now = utcnow()
        db_session.add(
            Coupon(
                code="FECHAS",
                description="Fuera de fecha",
                discount_type=DiscountType.FIXED,
                discount_value=5,
                start_date=now - timedelta(days=days_before),
                end_date=now + timedelta(days=days_after),
            )
        )
        db_session.commit()
        response = client.post(
            "/coupons/validate", json={"code": "FECHAS", "cartTotal": 50}, headers=client_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == message

    def test_validate_inactive(self, client, admin_headers, client_headers, coupon):
        client.patch(f"/coupons/{coupon.id}/toggle", headers=admin_headers)
        response = client.post(
            "/coupons/validate", json={"code": "BOCATTO10", "cartTotal": 50}, headers=client_headers
        )
        assert response.json()["message"] == "Este cupón no está activo"

    def test_validate_exhausted_usage_limit(
        self, client, db_session, client_headers, other_headers, seed_product, coupon
    ):
        coupon.usage_limit = 1
        db_session.commit()

        _add(client, seed_product.id, quantity=2)
        assert _checkout(client, client_headers, couponCode="BOCATTO10").status_code == 201
        db_session.refresh(coupon)
        assert coupon.usage_count == 1

        response = client.post(
            "/coupons/validate", json={"code": "BOCATTO10", "cartTotal": 50}, headers=other_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Este cupón ha alcanzado su límite de uso"

    def test_record_usage_never_exceeds_limit(self, db_session, client_user, other_user, coupon):
        coupon.usage_limit = 1
        db_session.commit()
        service = CouponService(db_session)

        service.record_usage(coupon, client_user, "ORD-000001", 2.0, 20.0)
        db_session.commit()

        # a redemption that passed validation before the limit was reached
        with pytest.raises(ValidationError, match="límite de uso"):
            service.record_usage(coupon, other_user, "ORD-000002", 2.0, 20.0)
        db_session.rollback()

        db_session.refresh(coupon)
        assert coupon.usage_count == 1
        usages = db_session.scalars(select(CouponUsage).where(CouponUsage.coupon_id == coupon.id)).all()
        assert [u.order_number for u in usages] == ["ORD-000001"]

    def test_validate_unknown_code(self, client, client_headers):
        response = client.post(
            "/coupons/validate", json={"code": "NOEXISTE", "cartTotal": 50}, headers=client_headers
        )
        assert response.status_code == 404

    def test_update_end_before_start(self, client, admin_headers, coupon):
        response = client.put(
            f"/coupons/{coupon.id}",
            json={"endDate": (utcnow() - timedelta(days=5)).isoformat()},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_usage_reports(self, client, client_headers, admin_headers, seed_product, coupon):
        _add(client, seed_product.id, quantity=2)
        _checkout(client, client_headers, couponCode="BOCATTO10")

        report = client.get("/coupons/usage", headers=admin_headers).json()["data"]
        assert report["totals"] == {
            "totalUses": 1,
            "totalDiscountGiven": 2.0,
            "totalOrderValue": 20.0,
        }

        usage = client.get(f"/coupons/{coupon.id}/usage", headers=admin_headers).json()["data"]
        assert usage["stats"]["averageDiscount"] == 2.0
        assert usage["usages"][0]["user"]["email"] == "ana@correo.com"

    def test_delete_coupon(self, client, admin_headers, coupon):
        assert client.delete(f"/coupons/{coupon.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/coupons/{coupon.id}", headers=admin_headers).status_code == 404

    def test_listing_requires_admin(self, client, client_headers):
        assert client.get("/coupons", headers=client_headers).status_code == 403
