"""
Case template service - reusable defaults for new cases.
"""

import logging
from typing import Any, Dict, List

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import CaseTemplate

logger = logging.getLogger(__name__)

TEMPLATE_FIELDS = ("name", "category", "procedure_type", "anesthesia_type", "default_settings", "is_public")


class CaseTemplateService:

    @staticmethod
    def list_templates(db: Session, user_id: str) -> List[CaseTemplate]:
        """The user's own templates plus every public template, by name."""
        return (
            db.query(CaseTemplate)
            .filter(or_(CaseTemplate.created_by == user_id, CaseTemplate.is_public.is_(True)))
            .order_by(CaseTemplate.name, CaseTemplate.id)
            .all()
        )

    @staticmethod
    def create_template(db: Session, user_id: str, data: Dict[str, Any]) -> CaseTemplate:
        template = CaseTemplate(
            created_by=user_id,
            **{k: v for k, v in data.items() if k in TEMPLATE_FIELDS and v is not None}
        )
        db.add(template)
        db.commit()
        db.refresh(template)
        logger.info(f"Created case template {template.id} for user {user_id}")
        return template

    @staticmethod
    def delete_template(db: Session, template_id: int, user_id: str) -> None:
        """
        Delete a template owned by ``user_id``.

        Public templates of other users are visible but not deletable; they
        resolve to 404 like missing ones.
        """
        template = db.query(CaseTemplate).filter(
            CaseTemplate.id == template_id,
            CaseTemplate.created_by == user_id
        ).first()
        if not template:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
        db.delete(template)
        db.commit()
        logger.info(f"Deleted case template {template_id}")
