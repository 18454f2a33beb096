"""
Case Template model.

Reusable default field-sets for new cases. A template is visible to its owner,
and to everyone when ``is_public`` is set.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class CaseTemplate(Base):
    __tablename__ = "case_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    procedure_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    anesthesia_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    default_settings: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    created_by: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)

    __table_args__ = (
        Index("idx_case_templates_owner_public", "created_by", "is_public"),
    )
