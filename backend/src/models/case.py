"""
Case model - the central anesthesia case record.

Each case belongs to exactly one anesthesiologist (``anesthesiologist_id``),
which is the ownership key for every case-scoped query. A case references a
catalog procedure by id, or carries a ``custom_procedure_name`` when no
catalog entry fits.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Case(Base):
    """
    Anesthesia case record.

    Status is one of 'in_progress', 'completed' or 'cancelled'. The dedicated
    complete transition sets status and end_time unconditionally.
    """

    __tablename__ = "cases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)

    case_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    """Human-readable case number; generated when the client omits it."""

    # Patient linkage (natural key + denormalized name)
    patient_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    patient_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    surgeon_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Procedure
    procedure_id: Mapped[Optional[int]] = mapped_column(ForeignKey("procedures.id"), nullable=True)
    custom_procedure_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    procedure_category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Ownership
    anesthesiologist_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    supervisor_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Anesthesia details
    anesthesia_type: Mapped[str] = mapped_column(String(100), nullable=False)
    regional_block_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    custom_regional_block: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    asa_score: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    emergency_case: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Timing
    case_date: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    start_time: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP, nullable=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP, nullable=True)
    induction_time: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP, nullable=True)
    incision_time: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP, nullable=True)
    emergence_time: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP, nullable=True)
    case_duration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """Free-text duration as entered by the clinician (e.g. '2h 15m')."""

    # Clinical free text
    diagnosis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    complications: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    medications: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    induction_medications: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    maintenance_medications: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    post_op_medications: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    techniques: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    monitoring: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed")

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    # Relationships
    anesthesiologist = relationship("User", back_populates="cases")
    procedure = relationship("Procedure", lazy="joined")
    """Joined on read to embed {id, name, category} in responses."""

    __table_args__ = (
        Index("idx_cases_anesthesiologist_date", "anesthesiologist_id", "case_date"),
        Index("idx_cases_patient_id", "patient_id"),
        Index("idx_cases_status", "status"),
    )

    @property
    def duration_minutes(self) -> Optional[float]:
        """Minutes between start_time and end_time, when both are recorded."""
        if self.start_time is None or self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds() / 60.0
