"""
User model representing an authenticated practitioner.

Users are created lazily on first successful authentication and keyed by the
identity provider's subject claim. A user owns the patients, surgeons, cases
and templates they create.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, String, TIMESTAMP, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class User(Base):
    """
    Practitioner account synced from the OpenID Connect provider.

    Profile fields (specialty, license number, institution, picture) are
    edited by the user; role and active flag are managed by admins.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    """Identity provider subject (``sub`` claim)."""

    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    """Either 'user' or 'admin'. Checked on every admin request."""

    specialty: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    license_number: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    institution: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    theme_preference: Mapped[str] = mapped_column(String(10), nullable=False, default="dark")

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    cases = relationship("Case", back_populates="anesthesiologist")
    preferences = relationship("UserPreferences", back_populates="user", uselist=False)

    __table_args__ = (
        Index("idx_users_role", "role"),
        Index("idx_users_created_at", "created_at"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
