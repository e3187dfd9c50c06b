"""
Reservation Service - area bookings, pricing and overlap detection.

Business rules:
- Start in the future, end after start, start at most 30 days ahead
- Guests within the area's [min_capacity, max_capacity]
- No two pending/paid reservations of the same area overlap
- Price: base for the first hour, extra per hour or fraction after that

Usage:
    from rest_api.services.domain import ReservationService

    service = ReservationService(db)
    reservation = service.create(user, body)
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from rest_api.models import Area, Reservation, User, utcnow
from rest_api.repositories import ReservationFilters, ReservationRepository
from rest_api.services.base_service import BaseService
from shared.config.constants import PaymentMethod, ReservationRules, ReservationStatus, Roles
from shared.config.logging import reservation_logger as logger
from shared.utils.booking_schemas import ReservationCreate, ReservationOutput, ReservedSlot
from shared.utils.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from shared.utils.validators import ensure_utc, parse_iso_date


class ReservationService(BaseService[Reservation]):
    """Service for area reservations."""

    def __init__(self, db: Session):
        super().__init__(db, Reservation, ReservationRepository(db))

    @property
    def reservations(self) -> ReservationRepository:
        return self._repo

    # =========================================================================
    # Queries
    # =========================================================================

    def get_entity(self, reservation_id: int) -> Reservation:
        reservation = self.reservations.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reserva", reservation_id)
        return reservation

    def get_for_user(self, reservation_id: int, user: User) -> ReservationOutput:
        """Reservation visible to its owner and to admins."""
        reservation = self.get_entity(reservation_id)
        self._check_owner_or_admin(reservation, user, "ver esta reserva")
        return self.to_output(reservation)

    def list_for_user(
        self,
        user_id: int,
        *,
        status: str | None = None,
        upcoming: bool = False,
    ) -> list[ReservationOutput]:
        self.expire_past_pending()
        filters = ReservationFilters(
            user_id=user_id,
            status=status,
            upcoming=upcoming,
            now=utcnow(),
        )
        order = Reservation.start_time.asc() if upcoming else Reservation.start_time.desc()
        return [self.to_output(r) for r in self.reservations.find_all(filters, order_by=order)]

    def list_all(
        self,
        *,
        status: str | None = None,
        area_id: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[ReservationOutput]:
        """Admin listing filtered by status, area and start-date range (YYYY-MM-DD)."""
        self.expire_past_pending()
        filters = ReservationFilters(
            status=status,
            area_id=area_id,
            start_from=self._day_start(start_date) if start_date else None,
            start_until=self._day_start(end_date) + timedelta(days=1) if end_date else None,
        )
        entities = self.reservations.find_all(filters, order_by=Reservation.start_time.desc())
        return [self.to_output(r) for r in entities]

    def availability(self, area_id: int, day: str | None) -> dict:
        """Occupied slots of an area on a given day."""
        if not day:
            raise ValidationError("La fecha es requerida (YYYY-MM-DD)")
        day_start = self._day_start(day)

        area = self._db.get(Area, area_id)
        if area is None or not area.is_active:
            raise NotFoundError("Área", area_id)

        reservations = self.reservations.find_for_day(
            area_id, day_start, day_start + timedelta(days=1)
        )
        return {
            "areaId": area.id,
            "areaName": area.name,
            "date": day_start.date().isoformat(),
            "reservedSlots": [
                ReservedSlot.model_validate(r).model_dump(mode="json", by_alias=True)
                for r in reservations
            ],
        }

    # =========================================================================
    # Commands
    # =========================================================================

    def create(self, user: User, body: ReservationCreate) -> ReservationOutput:
        """
        Book an area for [start_time, end_time).

        Raises:
            ValidationError: Time range, booking window or guest count rules.
            NotFoundError: Unknown area.
            ConflictError: Another pending/paid reservation overlaps (409).
        """
        start_time = ensure_utc(body.start_time)
        end_time = ensure_utc(body.end_time)
        now = utcnow()

        if start_time <= now:
            raise ValidationError("La fecha de inicio debe ser en el futuro")
        if end_time <= start_time:
            raise ValidationError("La hora de fin debe ser posterior a la hora de inicio")
        if start_time > now + timedelta(days=ReservationRules.MAX_DAYS_AHEAD):
            raise ValidationError(
                f"Solo se puede reservar con hasta {ReservationRules.MAX_DAYS_AHEAD} días de anticipación"
            )

        area = self._db.get(Area, body.area_id)
        if area is None:
            raise NotFoundError("Área", body.area_id)
        if not area.is_active:
            raise ValidationError("El área no está disponible para reservas")
        if not area.min_capacity <= body.guest_count <= area.max_capacity:
            raise ValidationError(
                f"El número de invitados debe estar entre {area.min_capacity} y {area.max_capacity}",
                data={"minCapacity": area.min_capacity, "maxCapacity": area.max_capacity},
            )

        conflicts = self.reservations.find_overlapping(area.id, start_time, end_time)
        if conflicts:
            raise ConflictError(
                "El área ya está reservada en ese horario",
                data={
                    "conflicts": [
                        ReservedSlot.model_validate(r).model_dump(mode="json", by_alias=True)
                        for r in conflicts
                    ]
                },
                area_id=area.id,
            )

        reservation = Reservation(
            user_id=user.id,
            area_id=area.id,
            start_time=start_time,
            end_time=end_time,
            total_price=Reservation.calculate_price(start_time, end_time),
            status=ReservationStatus.PENDING,
            guest_count=body.guest_count,
            notes=body.notes,
            payment_method_simulated=body.payment_method_simulated,
        )
        reservation.set_created_by(user.id)
        self._db.add(reservation)
        self._commit("crear reserva", reservation)

        logger.info(
            "Reservation created",
            reservation_id=reservation.id,
            area_id=area.id,
            user_id=user.id,
            total_price=reservation.total_price,
        )
        return self.to_output(reservation)

    def cancel(self, reservation_id: int, user: User) -> ReservationOutput:
        """Cancel a reservation that has not started yet (owner or admin)."""
        reservation = self.get_entity(reservation_id)
        self._check_owner_or_admin(reservation, user, "cancelar esta reserva")

        if reservation.status in ReservationStatus.CLOSED:
            raise ValidationError(f"No se puede cancelar una reserva en estado '{reservation.status}'")
        if reservation.start_time <= utcnow():
            raise ValidationError("No se puede cancelar una reserva que ya comenzó")

        cancelled_by = Roles.ADMIN if user.is_admin and reservation.user_id != user.id else "user"
        return self._mark_cancelled(reservation, user, cancelled_by)

    def admin_cancel(self, reservation_id: int, admin: User) -> ReservationOutput:
        reservation = self.get_entity(reservation_id)
        if reservation.status == ReservationStatus.CANCELLED:
            raise ValidationError("La reserva ya está cancelada")
        return self._mark_cancelled(reservation, admin, Roles.ADMIN)

    def confirm_payment(
        self,
        reservation_id: int,
        user: User,
        payment_method: str | None = None,
    ) -> ReservationOutput:
        """Simulated payment of a pending reservation by its owner."""
        reservation = self.get_entity(reservation_id)
        if reservation.user_id != user.id:
            raise ForbiddenError("pagar esta reserva")

        if reservation.status == ReservationStatus.PAID:
            raise ValidationError("La reserva ya está pagada")
        if reservation.status in ReservationStatus.CLOSED or reservation.is_expired:
            raise ValidationError("No se puede pagar una reserva cancelada o expirada")

        reservation.status = ReservationStatus.PAID
        reservation.paid_at = utcnow()
        reservation.payment_method_simulated = payment_method or reservation.payment_method_simulated or PaymentMethod.CARD
        reservation.set_updated_by(user.id)
        self._commit("confirmar pago", reservation)

        logger.info("Reservation paid", reservation_id=reservation.id, user_id=user.id)
        return self.to_output(reservation)

    def expire_past_pending(self) -> int:
        """Mark pending reservations whose time range has passed as expired."""
        result = self._db.execute(
            update(Reservation)
            .where(
                Reservation.status == ReservationStatus.PENDING,
                Reservation.end_time < utcnow(),
            )
            .values(status=ReservationStatus.EXPIRED)
        )
        if result.rowcount:
            self._commit("expirar reservas")
            logger.info("Expired pending reservations", count=result.rowcount)
        return result.rowcount or 0

    # =========================================================================
    # Helpers
    # =========================================================================

    def to_output(self, reservation: Reservation) -> ReservationOutput:
        return ReservationOutput.model_validate(reservation)

    def _mark_cancelled(self, reservation: Reservation, actor: User, cancelled_by: str) -> ReservationOutput:
        reservation.status = ReservationStatus.CANCELLED
        reservation.cancelled_at = utcnow()
        reservation.cancelled_by = cancelled_by
        reservation.set_updated_by(actor.id)
        self._commit("cancelar reserva", reservation)

        logger.info(
            "Reservation cancelled",
            reservation_id=reservation.id,
            cancelled_by=cancelled_by,
            actor_id=actor.id,
        )
        return self.to_output(reservation)

    @staticmethod
    def _check_owner_or_admin(reservation: Reservation, user: User, action: str) -> None:
        if reservation.user_id != user.id and not user.is_admin:
            raise ForbiddenError(action)

    @staticmethod
    def _day_start(value: str) -> datetime:
        try:
            day = parse_iso_date(value)
        except ValueError as e:
            raise ValidationError(str(e))
        return datetime.combine(day, time.min, tzinfo=timezone.utc)
