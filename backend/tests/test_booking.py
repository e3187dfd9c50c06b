"""
Tests for reservable areas and reservations.
"""

from datetime import timedelta

import pytest

from rest_api.models import Reservation, utcnow
from shared.config.constants import ReservationStatus
from tests.conftest import FAKE_IMAGE_URL, PNG_BYTES, future_slot


def _book(client, headers, area_id, *, days=2, hour=19, hours=2, guests=4):
    start, end = future_slot(days=days, hour=hour, hours=hours)
    return client.post(
        "/reservations",
        json={"areaId": area_id, "startTime": start, "endTime": end, "guestCount": guests},
        headers=headers,
    )


def _started_reservation(db_session, user, area) -> Reservation:
    now = utcnow()
    reservation = Reservation(
        user_id=user.id,
        area_id=area.id,
        start_time=now - timedelta(hours=1),
        end_time=now + timedelta(hours=1),
        total_price=7.5,
        status=ReservationStatus.PAID,
        guest_count=2,
    )
    db_session.add(reservation)
    db_session.commit()
    return reservation


class TestPricing:
    @pytest.mark.parametrize(
        "hours,expected",
        [(0.5, 5.0), (1, 5.0), (1.25, 7.5), (2, 7.5), (3.5, 12.5)],
    )
    def test_price_by_duration(self, hours, expected):
        start = utcnow()
        assert Reservation.calculate_price(start, start + timedelta(hours=hours)) == expected

    def test_empty_range_is_rejected(self):
        start = utcnow()
        with pytest.raises(ValueError):
            Reservation.calculate_price(start, start)


class TestAreas:
    """Area management."""

    def test_list_and_get(self, client, seed_area):
        response = client.get("/areas")
        assert response.status_code == 200
        area = response.json()["data"][0]
        assert area["capacityRange"] == "2-10"
        assert client.get(f"/areas/{seed_area.id}").json()["data"]["name"] == "Terraza"

    def test_create_area_multipart(self, client, admin_headers, uploads):
        response = client.post(
            "/areas",
            data={
                "name": "Salón Privado",
                "description": "Salón cerrado para eventos y reuniones",
                "minCapacity": "6",
                "maxCapacity": "20",
                "features": '["Proyector", "Aire acondicionado"]',
            },
            files={"image": ("salon.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["features"] == ["Proyector", "Aire acondicionado"]
        assert data["imageUrl"] == FAKE_IMAGE_URL
        assert uploads == ["bocatto/areas"]

    def test_create_area_with_inverted_capacity(self, client, admin_headers, uploads):
        response = client.post(
            "/areas",
            json={
                "name": "Barra",
                "description": "Barra frente a la cocina abierta",
                "minCapacity": 8,
                "maxCapacity": 2,
                "features": ["Cocina abierta"],
            },
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert uploads == []

    def test_partial_update_keeps_capacity_rule(self, client, admin_headers, seed_area):
        response = client.put(
            f"/areas/{seed_area.id}", json={"maxCapacity": 1}, headers=admin_headers
        )
        assert response.status_code == 400

        response = client.put(
            f"/areas/{seed_area.id}", json={"maxCapacity": 12}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["capacityRange"] == "2-12"

    def test_delete_is_soft(self, client, admin_headers, seed_area):
        response = client.delete(f"/areas/{seed_area.id}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get("/areas?active_only=true").json()["data"] == []
        assert client.get(f"/areas/{seed_area.id}").json()["data"]["isActive"] is False

    def test_toggle_status(self, client, admin_headers, seed_area):
        response = client.patch(f"/areas/{seed_area.id}/toggle-status", headers=admin_headers)
        assert response.json()["message"] == "Área desactivada exitosamente"
        response = client.patch(f"/areas/{seed_area.id}/toggle-status", headers=admin_headers)
        assert response.json()["message"] == "Área activada exitosamente"


class TestReservationCreate:
    def test_create_reservation(self, client, client_headers, seed_area):
        response = _book(client, client_headers, seed_area.id, hours=2)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["totalPrice"] == 7.5
        assert data["durationHours"] == 2
        assert data["area"]["name"] == "Terraza"

    def test_requires_login(self, client, seed_area):
        response = _book(client, {}, seed_area.id)
        assert response.status_code == 401

    def test_start_in_the_past(self, client, client_headers, seed_area):
        response = _book(client, client_headers, seed_area.id, days=-1)
        assert response.status_code == 400

    def test_end_before_start(self, client, client_headers, seed_area):
        start, end = future_slot()
        response = client.post(
            "/reservations",
            json={"areaId": seed_area.id, "startTime": end, "endTime": start, "guestCount": 4},
            headers=client_headers,
        )
        assert response.status_code == 400

    def test_more_than_thirty_days_ahead(self, client, client_headers, seed_area):
        response = _book(client, client_headers, seed_area.id, days=32)
        assert response.status_code == 400

    @pytest.mark.parametrize("guests", [1, 11])
    def test_guest_count_outside_capacity(self, client, client_headers, seed_area, guests):
        response = _book(client, client_headers, seed_area.id, guests=guests)
        assert response.status_code == 400
        assert response.json()["data"] == {"minCapacity": 2, "maxCapacity": 10}

    def test_inactive_area(self, client, db_session, client_headers, seed_area):
        seed_area.is_active = False
        db_session.commit()
        response = _book(client, client_headers, seed_area.id)
        assert response.status_code == 400

    def test_unknown_area(self, client, client_headers):
        response = _book(client, client_headers, 999)
        assert response.status_code == 404

    def test_overlap_is_a_conflict(self, client, client_headers, other_headers, seed_area):
        first = _book(client, client_headers, seed_area.id, hour=19, hours=2)
        assert first.status_code == 201

        response = _book(client, other_headers, seed_area.id, hour=20, hours=2)
        assert response.status_code == 409
        conflicts = response.json()["data"]["conflicts"]
        assert [c["id"] for c in conflicts] == [first.json()["data"]["id"]]

    def test_back_to_back_is_allowed(self, client, client_headers, other_headers, seed_area):
        assert _book(client, client_headers, seed_area.id, hour=19, hours=2).status_code == 201
        assert _book(client, other_headers, seed_area.id, hour=21, hours=2).status_code == 201

    def test_cancelled_reservation_frees_the_slot(self, client, client_headers, other_headers, seed_area):
        first = _book(client, client_headers, seed_area.id)
        client.delete(f"/reservations/{first.json()['data']['id']}", headers=client_headers)
        assert _book(client, other_headers, seed_area.id).status_code == 201


class TestAvailability:
    def test_lists_occupied_slots(self, client, client_headers, seed_area):
        booked = _book(client, client_headers, seed_area.id).json()["data"]
        day = future_slot()[0][:10]

        response = client.get(f"/reservations/availability/{seed_area.id}?date={day}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["areaName"] == "Terraza"
        assert data["date"] == day
        assert [slot["id"] for slot in data["reservedSlots"]] == [booked["id"]]

    def test_requires_date(self, client, seed_area):
        response = client.get(f"/reservations/availability/{seed_area.id}")
        assert response.status_code == 400

    def test_rejects_malformed_date(self, client, seed_area):
        response = client.get(f"/reservations/availability/{seed_area.id}?date=21-10-2026")
        assert response.status_code == 400


class TestReservationLifecycle:
    def test_owner_and_admin_can_read(self, client, client_headers, other_headers, admin_headers, seed_area):
        reservation_id = _book(client, client_headers, seed_area.id).json()["data"]["id"]
        assert client.get(f"/reservations/{reservation_id}", headers=client_headers).status_code == 200
        assert client.get(f"/reservations/{reservation_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/reservations/{reservation_id}", headers=other_headers).status_code == 403

    def test_my_reservations(self, client, client_headers, other_headers, seed_area):
        _book(client, client_headers, seed_area.id, days=2)
        _book(client, client_headers, seed_area.id, days=3)
        _book(client, other_headers, seed_area.id, days=4)

        response = client.get("/reservations/my-reservations?upcoming=true", headers=client_headers)
        data = response.json()["data"]
        assert response.json()["count"] == 2
        assert data[0]["startTime"] < data[1]["startTime"]

    def test_cancel_by_owner(self, client, client_headers, seed_area):
        reservation_id = _book(client, client_headers, seed_area.id).json()["data"]["id"]
        response = client.delete(f"/reservations/{reservation_id}", headers=client_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "cancelled"
        assert data["cancelledBy"] == "user"

        again = client.delete(f"/reservations/{reservation_id}", headers=client_headers)
        assert again.status_code == 400

    def test_cannot_cancel_started_reservation(self, client, db_session, client_user, client_headers, seed_area):
        reservation = _started_reservation(db_session, client_user, seed_area)
        response = client.delete(f"/reservations/{reservation.id}", headers=client_headers)
        assert response.status_code == 400

    def test_confirm_payment(self, client, client_headers, seed_area):
        reservation_id = _book(client, client_headers, seed_area.id).json()["data"]["id"]
        response = client.post(
            f"/reservations/{reservation_id}/confirm-payment",
            json={"paymentMethod": "transfer"},
            headers=client_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "paid"
        assert data["paymentMethodSimulated"] == "transfer"
        assert data["paidAt"] is not None

        again = client.post(f"/reservations/{reservation_id}/confirm-payment", headers=client_headers)
        assert again.status_code == 400
        assert again.json()["message"] == "La reserva ya está pagada"

    def test_only_owner_pays(self, client, client_headers, admin_headers, seed_area):
        reservation_id = _book(client, client_headers, seed_area.id).json()["data"]["id"]
        response = client.post(f"/reservations/{reservation_id}/confirm-payment", headers=admin_headers)
        assert response.status_code == 403

    def test_admin_cancel(self, client, client_headers, admin_headers, seed_area):
        reservation_id = _book(client, client_headers, seed_area.id).json()["data"]["id"]
        response = client.delete(f"/reservations/{reservation_id}/admin-cancel", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["cancelledBy"] == "admin"

        again = client.delete(f"/reservations/{reservation_id}/admin-cancel", headers=admin_headers)
        assert again.json()["message"] == "La reserva ya está cancelada"

    def test_admin_listing_filters(self, client, client_headers, admin_headers, seed_area):
        _book(client, client_headers, seed_area.id, days=2)
        _book(client, client_headers, seed_area.id, days=5)
        day = future_slot(days=2)[0][:10]

        response = client.get(
            f"/reservations/admin/all?areaId={seed_area.id}&startDate={day}&endDate={day}",
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_admin_listing_requires_admin(self, client, client_headers):
        response = client.get("/reservations/admin/all", headers=client_headers)
        assert response.status_code == 403

    def test_past_pending_reservations_expire(self, client, db_session, client_user, client_headers, seed_area):
        now = utcnow()
        reservation = Reservation(
            user_id=client_user.id,
            area_id=seed_area.id,
            start_time=now - timedelta(hours=3),
            end_time=now - timedelta(hours=1),
            total_price=7.5,
            status=ReservationStatus.PENDING,
            guest_count=2,
        )
        db_session.add(reservation)
        db_session.commit()

        response = client.get("/reservations/my-reservations", headers=client_headers)
        assert response.json()["data"][0]["status"] == "expired"
