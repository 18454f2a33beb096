"""
Case Photo model.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class CasePhoto(Base):
    """
    Image attached to a case.

    ``case_id`` is checked against the cases table at upload time but carries
    no database-level foreign key: deleting a case leaves its photos (and the
    files on disk) in place.
    """
    __tablename__ = "case_photos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(Integer, nullable=False)

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Generated storage filename under the uploads directory."""

    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    uploaded_by: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    __table_args__ = (
        Index("idx_case_photos_case", "case_id"),
    )
