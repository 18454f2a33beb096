"""
Procedure service for the global procedure catalog.

The catalog is shared by all users. Seeding is idempotent: a name that is
already present is skipped rather than duplicated.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import PROCEDURE_LIST_LIMIT
from core.procedure_catalog import DEFAULT_PROCEDURES
from models import Procedure

logger = logging.getLogger(__name__)

PROCEDURE_FIELDS = ("name", "category", "description", "duration", "complexity")


class ProcedureService:
    """Service class for procedure catalog operations."""

    @staticmethod
    def list_procedures(db: Session, limit: int = PROCEDURE_LIST_LIMIT) -> List[Procedure]:
        return db.query(Procedure).order_by(Procedure.name).limit(limit).all()

    @staticmethod
    def get_procedure(db: Session, procedure_id: int) -> Optional[Procedure]:
        return db.query(Procedure).filter(Procedure.id == procedure_id).first()

    @staticmethod
    def create_procedure(db: Session, data: Dict[str, Any]) -> Procedure:
        """
        Add a catalog entry.

        Raises:
            HTTPException: 409 if a procedure with the same name exists
        """
        values = {k: v for k, v in data.items() if k in PROCEDURE_FIELDS}
        if db.query(Procedure).filter(Procedure.name == values["name"]).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A procedure with this name already exists"
            )
        procedure = Procedure(**values)
        db.add(procedure)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A procedure with this name already exists"
            )
        db.refresh(procedure)
        logger.info(f"Created procedure {procedure.id}: {procedure.name}")
        return procedure

    @staticmethod
    def seed_procedures(db: Session, procedures: Iterable[Dict[str, Any]]) -> int:
        """
        Insert every procedure whose name is not yet in the catalog.

        Returns:
            Number of procedures added
        """
        existing = {name for (name,) in db.query(Procedure.name).all()}
        added = 0
        for entry in procedures:
            if entry["name"] in existing:
                continue
            db.add(Procedure(**{k: v for k, v in entry.items() if k in PROCEDURE_FIELDS}))
            existing.add(entry["name"])
            added += 1
        db.commit()
        logger.info(f"Seeded {added} procedures ({len(existing)} in catalog)")
        return added

    @staticmethod
    def seed_default_procedures(db: Session) -> int:
        return ProcedureService.seed_procedures(db, DEFAULT_PROCEDURES)
