# pyright: reportMissingTypeStubs=false
"""
Surgeon API endpoints.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import CamelModel, SurgeonResponse
from api.shared import validate_optional_text, validate_required_text
from auth.dependencies import UserContext, get_current_user
from core.database import get_db
from services.surgeon_service import SurgeonService

logger = logging.getLogger(__name__)

router = APIRouter()


class SurgeonUpdateRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    specialty: Optional[str] = None
    institution: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return validate_required_text(v)

    @field_validator("specialty", "institution", "email", "phone")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_text(v)


class SurgeonCreateRequest(SurgeonUpdateRequest):
    first_name: str
    last_name: str


@router.get("/surgeons", summary="List surgeons", response_model=List[SurgeonResponse])
async def list_surgeons(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[SurgeonResponse]:
    """List the current user's surgeons sorted by last name."""
    return [
        SurgeonResponse.model_validate(surgeon)
        for surgeon in SurgeonService.list_surgeons(db, current_user.user_id)
    ]


@router.post(
    "/surgeons",
    summary="Create surgeon",
    response_model=SurgeonResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_surgeon(
    request: SurgeonCreateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> SurgeonResponse:
    surgeon = SurgeonService.create_surgeon(db, current_user.user_id, request.model_dump(exclude_unset=True))
    return SurgeonResponse.model_validate(surgeon)


@router.patch("/surgeons/{surgeon_id}", summary="Update surgeon", response_model=SurgeonResponse)
async def update_surgeon(
    surgeon_id: int,
    request: SurgeonUpdateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> SurgeonResponse:
    surgeon = SurgeonService.get_owned_surgeon(db, surgeon_id, current_user.user_id)
    updates = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None or k not in ("first_name", "last_name")}
    surgeon = SurgeonService.update_surgeon(db, surgeon, updates)
    return SurgeonResponse.model_validate(surgeon)


@router.delete("/surgeons/{surgeon_id}", summary="Delete surgeon", status_code=status.HTTP_204_NO_CONTENT)
async def delete_surgeon(
    surgeon_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Response:
    surgeon = SurgeonService.get_owned_surgeon(db, surgeon_id, current_user.user_id)
    SurgeonService.delete_surgeon(db, surgeon)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
