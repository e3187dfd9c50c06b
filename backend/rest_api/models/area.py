"""
Area Model: reservable dining spaces.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import CheckConstraint, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base


class Area(AuditMixin, Base):
    """
    Dining area that can be reserved.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id from AuditMixin.
    """

    __tablename__ = "area"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    min_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    features: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("min_capacity >= 1", name="chk_area_min_capacity"),
        CheckConstraint("max_capacity >= min_capacity", name="chk_area_capacity_range"),
    )

    @property
    def capacity_range(self) -> str:
        return f"{self.min_capacity}-{self.max_capacity}"
