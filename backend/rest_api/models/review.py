"""
Review Model: user ratings of products, orders and reservations.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, UTCDateTime

if TYPE_CHECKING:
    from .user import User


class Review(AuditMixin, Base):
    """
    Review of a target identified by (type, target_id).

    A user reviews each target at most once. New and edited reviews wait for
    admin approval before they are listed publicly.
    """

    __tablename__ = "review"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(100))
    comment: Mapped[str] = mapped_column(String(1000), nullable=False)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    admin_response: Mapped[Optional[str]] = mapped_column(String(500))
    responded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    responded_by: Mapped[Optional[int]] = mapped_column(Integer)

    user: Mapped["User"] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "type", "target_id", name="uq_review_user_target"),
        CheckConstraint("stars >= 1 AND stars <= 5", name="chk_review_stars_range"),
        Index("ix_review_target_approved", "type", "target_id", "is_approved"),
        Index("ix_review_approved_created", "is_approved", "created_at"),
    )
