"""
User Preferences model - one settings row per user.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)

    default_anesthesia_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    default_institution: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    export_settings: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    dashboard_settings: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    notification_settings: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    user = relationship("User", back_populates="preferences")
