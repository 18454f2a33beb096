# pyright: reportMissingTypeStubs=false
"""
Procedure catalog API endpoints.

The catalog is global: every authenticated user can read it and add entries;
bulk seeding is admin-only.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from api.responses import CamelModel, InitProceduresResponse, ProcedureResponse
from api.shared import blank_to_none, validate_optional_text, validate_required_text
from auth.dependencies import UserContext, get_current_user, require_admin_role
from core.constants import PROCEDURE_LIST_LIMIT
from core.database import get_db
from core.procedure_catalog import PROCEDURE_CATEGORIES
from models import Procedure
from services.procedure_service import ProcedureService

logger = logging.getLogger(__name__)

router = APIRouter()


class ProcedureCreateRequest(CamelModel):
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    complexity: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_required_text(v)

    @field_validator("category", "description", "complexity")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_text(v)

    @field_validator("duration", mode="before")
    @classmethod
    def empty_duration(cls, v: Any) -> Any:
        return blank_to_none(v)


@router.get("/procedures", summary="List procedures", response_model=List[ProcedureResponse])
async def list_procedures(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    limit: int = Query(PROCEDURE_LIST_LIMIT, ge=1, le=1000)
) -> List[ProcedureResponse]:
    return [ProcedureResponse.model_validate(p) for p in ProcedureService.list_procedures(db, limit)]


@router.post(
    "/procedures",
    summary="Create procedure",
    response_model=ProcedureResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_procedure(
    request: ProcedureCreateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> ProcedureResponse:
    procedure = ProcedureService.create_procedure(db, request.model_dump(exclude_unset=True))
    return ProcedureResponse.model_validate(procedure)


@router.post("/init-procedures", summary="Seed the default procedure catalog", response_model=InitProceduresResponse)
async def init_procedures(
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> InitProceduresResponse:
    """
    Add every default procedure missing from the catalog.

    Safe to call repeatedly: existing names are skipped.
    """
    created = ProcedureService.seed_default_procedures(db)
    total = db.query(func.count(Procedure.id)).scalar() or 0
    logger.info(f"Admin {current_user.user_id} initialized procedures: {created} created, {total} total")
    return InitProceduresResponse(
        message="Comprehensive procedures initialized",
        total=total,
        created=created,
        categories=list(PROCEDURE_CATEGORIES),
    )
