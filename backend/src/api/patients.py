# pyright: reportMissingTypeStubs=false
"""
Patient Management API endpoints.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import CamelModel, PatientResponse
from api.shared import blank_to_none, validate_optional_text, validate_required_text
from auth.dependencies import UserContext, get_current_user
from core.constants import PATIENT_LIST_LIMIT
from core.database import get_db
from services.patient_service import PatientService

logger = logging.getLogger(__name__)

router = APIRouter()


class PatientUpdateRequest(CamelModel):
    """Request model for updating a patient; only supplied fields change."""
    patient_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    allergies: Optional[str] = None
    medical_history: Optional[str] = None

    @field_validator("age", "weight", "height", "gender", mode="before")
    @classmethod
    def empty_as_missing(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("patient_id", "first_name")
    @classmethod
    def validate_required(cls, v: Optional[str]) -> Optional[str]:
        return validate_required_text(v)

    @field_validator("last_name", "allergies", "medical_history")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_text(v)

    @field_validator("age")
    @classmethod
    def validate_age(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 0 <= v <= 150:
            raise ValueError("Age must be between 0 and 150")
        return v

    @field_validator("weight", "height")
    @classmethod
    def validate_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Must be a positive number")
        return v


class PatientCreateRequest(PatientUpdateRequest):
    """Request model for creating a patient."""
    patient_id: str
    first_name: str


@router.get("/patients", summary="List patients", response_model=List[PatientResponse])
async def list_patients(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    limit: int = Query(PATIENT_LIST_LIMIT, ge=1, le=500),
    search: Optional[str] = Query(None, max_length=200, description="Match first/last name or patient ID")
) -> List[PatientResponse]:
    """
    List the current user's patients, newest first.

    With ``search`` the list is filtered by a case-insensitive substring match.
    """
    if search and search.strip():
        patients = PatientService.search_patients(db, current_user.user_id, search)
    else:
        patients = PatientService.list_patients(db, current_user.user_id, limit)
    return [PatientResponse.model_validate(patient) for patient in patients]


@router.post(
    "/patients",
    summary="Create patient",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_patient(
    request: PatientCreateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> PatientResponse:
    patient = PatientService.create_patient(db, current_user.user_id, request.model_dump(exclude_unset=True))
    return PatientResponse.model_validate(patient)


@router.get("/patients/{patient_id}", summary="Get patient", response_model=PatientResponse)
async def get_patient(
    patient_id: str,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> PatientResponse:
    """Look up a patient by external patient ID, or by numeric id."""
    patient = PatientService.get_owned_patient(db, patient_id, current_user.user_id)
    return PatientResponse.model_validate(patient)


@router.patch("/patients/{patient_id}", summary="Update patient", response_model=PatientResponse)
async def update_patient(
    patient_id: str,
    request: PatientUpdateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> PatientResponse:
    patient = PatientService.get_owned_patient(db, patient_id, current_user.user_id)
    patient = PatientService.update_patient(db, patient, request.model_dump(exclude_unset=True))
    return PatientResponse.model_validate(patient)


@router.delete(
    "/patients/{patient_id}",
    summary="Delete patient",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_patient(
    patient_id: str,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Response:
    patient = PatientService.get_owned_patient(db, patient_id, current_user.user_id)
    PatientService.delete_patient(db, patient)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
