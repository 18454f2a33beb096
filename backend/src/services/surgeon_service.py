"""
Surgeon service - per-user surgeon address book.
"""

import logging
from typing import Any, Dict, List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from models import Surgeon

logger = logging.getLogger(__name__)

SURGEON_FIELDS = ("first_name", "last_name", "specialty", "institution", "email", "phone")


class SurgeonService:
    """Owner-scoped CRUD over surgeons."""

    @staticmethod
    def list_surgeons(db: Session, user_id: str) -> List[Surgeon]:
        return (
            db.query(Surgeon)
            .filter(Surgeon.created_by == user_id)
            .order_by(Surgeon.last_name, Surgeon.first_name)
            .all()
        )

    @staticmethod
    def get_owned_surgeon(db: Session, surgeon_id: int, user_id: str) -> Surgeon:
        surgeon = db.query(Surgeon).filter(
            Surgeon.id == surgeon_id,
            Surgeon.created_by == user_id
        ).first()
        if not surgeon:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Surgeon not found")
        return surgeon

    @staticmethod
    def create_surgeon(db: Session, user_id: str, data: Dict[str, Any]) -> Surgeon:
        surgeon = Surgeon(
            created_by=user_id,
            **{k: v for k, v in data.items() if k in SURGEON_FIELDS}
        )
        db.add(surgeon)
        db.commit()
        db.refresh(surgeon)
        logger.info(f"Created surgeon {surgeon.id} for user {user_id}")
        return surgeon

    @staticmethod
    def update_surgeon(db: Session, surgeon: Surgeon, data: Dict[str, Any]) -> Surgeon:
        for field, value in data.items():
            if field in SURGEON_FIELDS:
                setattr(surgeon, field, value)
        db.commit()
        db.refresh(surgeon)
        return surgeon

    @staticmethod
    def delete_surgeon(db: Session, surgeon: Surgeon) -> None:
        db.delete(surgeon)
        db.commit()
        logger.info(f"Deleted surgeon {surgeon.id}")
