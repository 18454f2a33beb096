"""
Patient model representing individuals anesthetized in logged cases.

Patients are identified system-wide by a human-entered ``patient_id`` (e.g. a
hospital MRN). A patient row is created explicitly through the patients API or
implicitly when a case references a ``patient_id`` that is not yet on file.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Patient(Base):
    """
    Patient entity with demographics and clinical background.

    Owned by the user recorded in ``created_by``; list and search queries are
    always filtered by that owner.
    """

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    """Database-assigned numeric identifier."""

    patient_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    """External patient identifier, unique across all users."""

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    """Weight in kilograms."""

    height: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    """Height in centimetres."""

    bmi: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    """Derived from weight and height whenever both are known."""

    allergies: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    medical_history: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_by: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), nullable=True)
    """Owning user."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    __table_args__ = (
        Index("idx_patients_created_by", "created_by"),
        Index("idx_patients_created_at", "created_at"),
    )
