"""
Reservation router - /reservations/*
CLEAN-ARCH: Thin router delegating to ReservationService.

Static paths are declared before /{reservation_id}.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import current_user, ok, require_admin
from rest_api.services.domain import ReservationService
from shared.infrastructure.db import get_db
from shared.utils.booking_schemas import ConfirmPaymentRequest, ReservationCreate


router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.get("/availability/{area_id}")
def area_availability(
    area_id: int,
    date: str | None = Query(default=None, description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> dict:
    """Occupied slots of an area on a day."""
    return ok(ReservationService(db).availability(area_id, date))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_reservation(
    body: ReservationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    reservation = ReservationService(db).create(user, body)
    return ok(reservation, message="Reserva creada exitosamente")


@router.get("/my-reservations")
def my_reservations(
    status: str | None = None,
    upcoming: bool = False,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    reservations = ReservationService(db).list_for_user(user.id, status=status, upcoming=upcoming)
    return ok(reservations, count=len(reservations))


@router.get("/admin/all")
def all_reservations(
    status: str | None = None,
    area_id: int | None = Query(default=None, alias="areaId"),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    reservations = ReservationService(db).list_all(
        status=status,
        area_id=area_id,
        start_date=start_date,
        end_date=end_date,
    )
    return ok(reservations, count=len(reservations))


@router.get("/{reservation_id}")
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    return ok(ReservationService(db).get_for_user(reservation_id, user))


@router.delete("/{reservation_id}")
def cancel_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    reservation = ReservationService(db).cancel(reservation_id, user)
    return ok(reservation, message="Reserva cancelada exitosamente")


@router.post("/{reservation_id}/confirm-payment")
def confirm_payment(
    reservation_id: int,
    body: ConfirmPaymentRequest | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """Simulated payment; moves a pending reservation to paid."""
    method = body.payment_method if body else None
    reservation = ReservationService(db).confirm_payment(reservation_id, user, method)
    return ok(reservation, message="Pago confirmado exitosamente")


@router.delete("/{reservation_id}/admin-cancel")
def admin_cancel_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    reservation = ReservationService(db).admin_cancel(reservation_id, admin)
    return ok(reservation, message="Reserva cancelada por el administrador")
