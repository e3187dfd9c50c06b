"""
Review Service - customer reviews of products, orders and reservations.

Usage:
    from rest_api.services.domain import ReviewService

    service = ReviewService(db)
    review = service.create(user, body)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from rest_api.models import Order, Reservation, Review, User, utcnow
from rest_api.repositories import OrderRepository
from rest_api.services.base_service import BaseService
from shared.config.constants import OrderStatus, ReservationStatus, ReviewType
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from shared.utils.content_schemas import ReviewCreate, ReviewOutput, ReviewUpdate

logger = get_logger(__name__)


class ReviewService(BaseService[Review]):
    """
    Service for reviews.

    Business rules:
    - One review per user and target
    - Only what the user actually consumed can be reviewed
    - New and edited reviews are listed only after admin approval
    """

    def __init__(self, db: Session):
        super().__init__(db, Review)
        self._orders = OrderRepository(db)

    # =========================================================================
    # Public queries
    # =========================================================================

    def target_reviews(self, review_type: str, target_id: int) -> dict[str, Any]:
        """Approved, visible reviews of a target with its rating summary."""
        reviews = self._db.execute(
            self._query()
            .where(
                Review.type == review_type,
                Review.target_id == target_id,
                Review.is_approved.is_(True),
                Review.is_visible.is_(True),
            )
            .order_by(Review.created_at.desc(), Review.id.desc())
        ).scalars().all()

        average, total = self._db.execute(
            select(func.avg(Review.stars), func.count(Review.id)).where(
                Review.type == review_type,
                Review.target_id == target_id,
                Review.is_approved.is_(True),
                Review.is_visible.is_(True),
            )
        ).one()

        return {
            "reviews": [self.to_output(r) for r in reviews],
            "averageRating": round(float(average), 1) if average is not None else 0,
            "totalReviews": total,
        }

    def get_review(self, review_id: int) -> ReviewOutput:
        return self.to_output(self.get_entity(review_id))

    def my_reviews(self, user: User) -> list[ReviewOutput]:
        reviews = self._db.execute(
            self._query()
            .where(Review.user_id == user.id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        ).scalars().all()
        return [self.to_output(r) for r in reviews]

    def pending(self) -> list[ReviewOutput]:
        """Reviews waiting for moderation (rejected ones are hidden and excluded)."""
        reviews = self._db.execute(
            self._query()
            .where(Review.is_approved.is_(False), Review.is_visible.is_(True))
            .order_by(Review.created_at.desc(), Review.id.desc())
        ).scalars().all()
        return [self.to_output(r) for r in reviews]

    # =========================================================================
    # Author commands
    # =========================================================================

    def create(self, user: User, body: ReviewCreate) -> ReviewOutput:
        """
        Raises:
            ValidationError: The user already reviewed the target.
            PermissionDeniedError: The user is not eligible to review the target.
        """
        if self._find_existing(user.id, body.type, body.target_id):
            raise ValidationError("Ya has dejado una reseña para este elemento")

        self._check_eligibility(user, body)

        review = Review(
            user_id=user.id,
            type=body.type,
            target_id=body.target_id,
            stars=body.stars,
            title=body.title or None,
            comment=body.comment,
            is_approved=False,
        )
        review.set_created_by(user.id)
        self._db.add(review)
        self._commit("crear reseña", review)

        logger.info(
            "Review created",
            review_id=review.id,
            type=review.type,
            target_id=review.target_id,
            user_id=user.id,
        )
        return self.to_output(review)

    def update(self, review_id: int, user: User, body: ReviewUpdate) -> ReviewOutput:
        """Edit an own review; it goes back to moderation."""
        review = self.get_entity(review_id)
        if review.user_id != user.id:
            raise PermissionDeniedError("No tienes permiso para editar esta reseña", review_id=review_id)

        data = body.model_dump(exclude_unset=True)
        for field_name in ("stars", "comment"):
            if data.get(field_name) is not None:
                setattr(review, field_name, data[field_name])
        if "title" in data:
            review.title = data["title"]

        review.is_approved = False
        review.set_updated_by(user.id)
        self._commit("actualizar reseña", review)

        logger.info("Review updated", review_id=review.id, user_id=user.id)
        return self.to_output(review)

    def delete(self, review_id: int, user: User) -> None:
        review = self.get_entity(review_id)
        if review.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError("No tienes permiso para eliminar esta reseña", review_id=review_id)

        self._db.delete(review)
        self._commit("eliminar reseña")

        logger.info("Review deleted", review_id=review_id, user_id=user.id)

    # =========================================================================
    # Moderation
    # =========================================================================

    def approve(self, review_id: int, admin: User) -> ReviewOutput:
        review = self.get_entity(review_id)
        review.is_approved = True
        review.is_visible = True
        review.set_updated_by(admin.id)
        self._commit("aprobar reseña", review)

        logger.info("Review approved", review_id=review.id, user_id=admin.id)
        return self.to_output(review)

    def reject(self, review_id: int, admin: User) -> ReviewOutput:
        review = self.get_entity(review_id)
        review.is_approved = False
        review.is_visible = False
        review.set_updated_by(admin.id)
        self._commit("rechazar reseña", review)

        logger.info("Review rejected", review_id=review.id, user_id=admin.id)
        return self.to_output(review)

    def respond(self, review_id: int, admin: User, response: str) -> ReviewOutput:
        review = self.get_entity(review_id)
        review.admin_response = response
        review.responded_at = utcnow()
        review.responded_by = admin.id
        self._commit("responder reseña", review)

        logger.info("Review answered", review_id=review.id, user_id=admin.id)
        return self.to_output(review)

    # =========================================================================
    # Helpers
    # =========================================================================

    def get_entity(self, review_id: int) -> Review:
        review = self._db.scalar(self._query().where(Review.id == review_id))
        if review is None:
            raise NotFoundError("Reseña", review_id)
        return review

    def to_output(self, review: Review) -> ReviewOutput:
        return ReviewOutput.model_validate(review)

    def _query(self):
        return select(Review).options(joinedload(Review.user))

    def _find_existing(self, user_id: int, review_type: str, target_id: int) -> Review | None:
        return self._db.scalar(
            select(Review).where(
                Review.user_id == user_id,
                Review.type == review_type,
                Review.target_id == target_id,
            )
        )

    def _check_eligibility(self, user: User, body: ReviewCreate) -> None:
        """
        Raises:
            PermissionDeniedError: With the reason the user cannot review the target.
        """
        if body.type == ReviewType.PRODUCT:
            if not self._orders.user_has_delivered_product(user.id, body.target_id):
                raise PermissionDeniedError("Solo puedes reseñar productos que hayas comprado")
            return

        if body.type == ReviewType.ORDER:
            order = self._db.scalar(
                select(Order).where(
                    Order.id == body.target_id,
                    Order.user_id == user.id,
                    Order.status == OrderStatus.DELIVERED,
                )
            )
            if order is None or (body.order_number and body.order_number.upper() != order.order_number):
                raise PermissionDeniedError("Solo puedes reseñar órdenes completadas que te pertenezcan")
            return

        reservation = self._db.scalar(
            select(Reservation).where(
                Reservation.id == body.target_id,
                Reservation.user_id == user.id,
                Reservation.status == ReservationStatus.PAID,
            )
        )
        if reservation is None:
            raise PermissionDeniedError("Solo puedes reseñar reservaciones pagadas que te pertenezcan")
        if reservation.end_time > utcnow():
            raise PermissionDeniedError(
                "Solo puedes reseñar reservaciones después de que hayan terminado"
            )
