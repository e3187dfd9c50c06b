"""
User Models: User, UserAllergy.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import AllergySeverity, Roles

from .base import AuditMixin, Base, EmailColumn, UTCDateTime, utcnow


class User(AuditMixin, Base):
    """
    Admin or client account.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id from AuditMixin.

    password_hash is required unless the account was created through Google
    (google_id set). Two-factor fields hold the encrypted TOTP secret and the
    hashed backup codes as [{"code": sha256, "used": bool, "usedAt": iso}].
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(EmailColumn, nullable=False, unique=True, index=True)
    password_hash: Mapped[Optional[str]] = mapped_column(Text)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Roles.CLIENT)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    address: Mapped[Optional[str]] = mapped_column(String(255))
    google_id: Mapped[Optional[str]] = mapped_column(String(100), unique=True)
    admin_access: Mapped[Optional[str]] = mapped_column(String(20))
    loyalty_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    profile_picture: Mapped[Optional[str]] = mapped_column(Text)

    # Two-factor authentication
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    two_factor_secret: Mapped[Optional[str]] = mapped_column(Text)
    two_factor_backup_codes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    # Set when a password check succeeded and the TOTP step is still due
    two_factor_pending_until: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)

    allergies: Mapped[list["UserAllergy"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserAllergy.id",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == Roles.ADMIN

    @property
    def backup_codes_remaining(self) -> int:
        return sum(1 for code in self.two_factor_backup_codes or [] if not code.get("used"))


class UserAllergy(Base):
    """An allergen registered by a user, with its severity."""

    __tablename__ = "user_allergy"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    allergen: Mapped[str] = mapped_column(String(30), nullable=False)
    severity: Mapped[str] = mapped_column(String(10), nullable=False, default=AllergySeverity.MEDIUM)
    added_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    user: Mapped["User"] = relationship(back_populates="allergies")

    __table_args__ = (
        UniqueConstraint("user_id", "allergen", name="uq_user_allergy_allergen"),
    )
