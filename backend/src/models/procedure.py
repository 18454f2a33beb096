"""
Procedure model - the global surgical procedure catalog.

Procedures are not owned by any user. They are seeded from
``core.procedure_catalog`` and referenced by cases through ``procedure_id``.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Procedure(Base):
    """
    Catalog entry for a surgical or diagnostic procedure.

    ``name`` is unique so that catalog seeding is idempotent.
    """

    __tablename__ = "procedures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Typical duration in minutes."""

    complexity: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
