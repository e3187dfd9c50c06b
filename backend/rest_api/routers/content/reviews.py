"""
Review router - /reviews/*
CLEAN-ARCH: Thin router delegating to ReviewService.

Public listings return approved and visible reviews only; moderation
endpoints require an administrator.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import current_user, ok, require_admin
from rest_api.services.domain import ReviewService
from shared.config.constants import ReviewType
from shared.infrastructure.db import get_db
from shared.utils.content_schemas import ReviewCreate, ReviewRespondRequest, ReviewUpdate


router = APIRouter(prefix="/reviews", tags=["reviews"])


# =============================================================================
# Public
# =============================================================================


@router.get("/product/{product_id}")
def product_reviews(product_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(ReviewService(db).target_reviews(ReviewType.PRODUCT, product_id))


@router.get("/order/{order_id}")
def order_reviews(order_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(ReviewService(db).target_reviews(ReviewType.ORDER, order_id))


@router.get("/reservation/{reservation_id}")
def reservation_reviews(reservation_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(ReviewService(db).target_reviews(ReviewType.RESERVATION, reservation_id))


# =============================================================================
# Authenticated
# =============================================================================


@router.get("/my-reviews")
def my_reviews(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    reviews = ReviewService(db).my_reviews(user)
    return ok(reviews, count=len(reviews))


@router.get("/pending")
def pending_reviews(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    reviews = ReviewService(db).pending()
    return ok(reviews, count=len(reviews))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(
    body: ReviewCreate,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """Review something the user bought or booked; waits for approval."""
    review = ReviewService(db).create(user, body)
    return ok(review, message="Reseña creada exitosamente. Será visible tras ser aprobada.")


@router.get("/{review_id}")
def get_review(review_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(ReviewService(db).get_review(review_id))


@router.put("/{review_id}")
def update_review(
    review_id: int,
    body: ReviewUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    review = ReviewService(db).update(review_id, user, body)
    return ok(review, message="Reseña actualizada exitosamente")


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    ReviewService(db).delete(review_id, user)
    return ok(message="Reseña eliminada exitosamente")


# =============================================================================
# Moderation
# =============================================================================


@router.patch("/{review_id}/approve")
def approve_review(
    review_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    review = ReviewService(db).approve(review_id, admin)
    return ok(review, message="Reseña aprobada")


@router.patch("/{review_id}/reject")
def reject_review(
    review_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    review = ReviewService(db).reject(review_id, admin)
    return ok(review, message="Reseña rechazada")


@router.post("/{review_id}/respond")
def respond_review(
    review_id: int,
    body: ReviewRespondRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    review = ReviewService(db).respond(review_id, admin, body.response)
    return ok(review, message="Respuesta agregada exitosamente")
