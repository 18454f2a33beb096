# pyright: reportMissingTypeStubs=false
"""
Case API endpoints.

Covers case CRUD, the complete transition, per-user stats and analytics, and
case photos. Case creation accepts either a JSON body or a multipart form
carrying an optional ``casePhoto`` image.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from pydantic import field_validator
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from api.responses import (
    CamelModel,
    CaseAnalyticsResponse,
    CasePhotoResponse,
    CaseResponse,
    CaseStatsResponse,
)
from api.shared import (
    blank_to_none,
    parse_datetime_field,
    parse_json_field,
    validate_body,
    validate_optional_text,
    validate_required_text,
)
from auth.dependencies import UserContext, get_current_user
from core.constants import CASE_LIST_LIMIT, CASE_STATUSES, SEARCH_RESULT_LIMIT
from core.database import get_db
from services.analytics_service import AnalyticsService
from services.case_photo_service import CasePhotoService, to_photo_response
from services.case_service import CaseService
from utils.datetime_utils import parse_datetime_value

logger = logging.getLogger(__name__)

router = APIRouter()

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")
PATIENT_DEMOGRAPHIC_FIELDS = ("weight", "height", "age")


class CaseFields(CamelModel):
    """Case fields shared by create and update; everything optional here."""
    case_number: Optional[str] = None
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    surgeon_name: Optional[str] = None
    procedure_id: Optional[int] = None
    custom_procedure_name: Optional[str] = None
    procedure_category: Optional[str] = None
    supervisor_id: Optional[str] = None
    anesthesia_type: Optional[str] = None
    regional_block_type: Optional[str] = None
    custom_regional_block: Optional[str] = None
    asa_score: Optional[str] = None
    emergency_case: Optional[bool] = None
    case_date: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    induction_time: Optional[datetime] = None
    incision_time: Optional[datetime] = None
    emergence_time: Optional[datetime] = None
    case_duration: Optional[str] = None
    diagnosis: Optional[str] = None
    complications: Optional[str] = None
    medications: Optional[Any] = None
    induction_medications: Optional[str] = None
    maintenance_medications: Optional[str] = None
    post_op_medications: Optional[str] = None
    techniques: Optional[Any] = None
    monitoring: Optional[Any] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    # Patient demographics carried on the case form; merged into the patient record
    weight: Optional[float] = None
    height: Optional[float] = None
    age: Optional[int] = None

    @field_validator(
        "case_date", "start_time", "end_time", "induction_time", "incision_time", "emergence_time",
        mode="before"
    )
    @classmethod
    def parse_datetimes(cls, v: Any) -> Any:
        return parse_datetime_field(v)

    @field_validator("medications", "techniques", "monitoring", mode="before")
    @classmethod
    def parse_json_blobs(cls, v: Any) -> Any:
        return parse_json_field(v)

    @field_validator(
        "procedure_id", "weight", "height", "age", "emergency_case", "case_number", "status",
        mode="before"
    )
    @classmethod
    def empty_as_missing(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("anesthesia_type")
    @classmethod
    def validate_anesthesia_type(cls, v: Optional[str]) -> Optional[str]:
        return validate_required_text(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in CASE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(CASE_STATUSES)}")
        return v

    @field_validator("patient_id", "patient_name", "surgeon_name", "custom_procedure_name")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_text(v)


class CaseCreateRequest(CaseFields):
    anesthesia_type: str
    case_date: datetime


class CaseUpdateRequest(CaseFields):
    pass


def _split_demographics(data: Dict[str, Any]) -> Dict[str, Any]:
    return {field: data.pop(field) for field in PATIENT_DEMOGRAPHIC_FIELDS if field in data}


def _parse_query_date(value: Optional[str]) -> Optional[datetime]:
    return parse_datetime_value(value) if value else None


@router.get("/cases", summary="List cases", response_model=List[CaseResponse])
async def list_cases(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None, max_length=200),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate")
) -> List[CaseResponse]:
    """
    List the current user's cases, most recent case date first.

    ``search`` takes precedence over the date filters. All three modes are
    paginated with ``limit``/``offset``.
    """
    if search and search.strip():
        cases = CaseService.search_cases(db, current_user.user_id, search, limit or SEARCH_RESULT_LIMIT, offset)
    elif start_date or end_date:
        cases = CaseService.list_cases_by_date_range(
            db,
            current_user.user_id,
            _parse_query_date(start_date),
            _parse_query_date(end_date),
            limit=limit or CASE_LIST_LIMIT,
            offset=offset,
        )
    else:
        cases = CaseService.list_cases(db, current_user.user_id, limit or CASE_LIST_LIMIT, offset)
    return [CaseResponse.model_validate(case) for case in cases]


@router.post(
    "/cases",
    summary="Create case",
    response_model=CaseResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_case(
    request: Request,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> CaseResponse:
    """
    Create a case from a JSON body or a multipart form.

    A ``patientId`` upserts the referenced patient. A ``casePhoto`` file in a
    multipart body is stored after the case is committed; a failure to store
    it is logged and does not fail the request.
    """
    content_type = request.headers.get("content-type", "").lower()
    photo: Optional[StarletteUploadFile] = None

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        fields: Dict[str, Any] = {}
        for key, value in form.items():
            if isinstance(value, StarletteUploadFile):
                if key == "casePhoto" and value.filename:
                    photo = value
                continue
            fields[key] = value
        payload = validate_body(CaseCreateRequest, fields)
    else:
        body = await request.json()
        payload = validate_body(CaseCreateRequest, body if isinstance(body, dict) else {})

    data = payload.model_dump(exclude_none=True)
    demographics = _split_demographics(data)
    case = CaseService.create_case(db, current_user.user_id, data, **demographics)

    if photo is not None:
        try:
            await CasePhotoService.upload_photo(db, case.id, current_user.user_id, photo)
        except Exception as e:
            db.rollback()
            logger.exception(f"Failed to store photo for case {case.id}: {e}")

    return CaseResponse.model_validate(case)


@router.get("/cases/stats", summary="Case statistics", response_model=CaseStatsResponse)
async def get_case_stats(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> CaseStatsResponse:
    """Dashboard aggregates: totals, this month, by anesthesia type and mean duration (minutes)."""
    return CaseStatsResponse.model_validate(CaseService.get_case_stats(db, current_user.user_id))


@router.get("/cases/analytics", summary="Case analytics", response_model=CaseAnalyticsResponse)
async def get_case_analytics(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate")
) -> CaseAnalyticsResponse:
    analytics = AnalyticsService.get_case_analytics(
        db,
        current_user.user_id,
        _parse_query_date(start_date),
        _parse_query_date(end_date),
    )
    return CaseAnalyticsResponse.model_validate(analytics)


@router.get("/cases/{case_id}", summary="Get case", response_model=CaseResponse)
async def get_case(
    case_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> CaseResponse:
    return CaseResponse.model_validate(CaseService.get_owned_case(db, case_id, current_user.user_id))


@router.patch("/cases/{case_id}", summary="Update case", response_model=CaseResponse)
async def update_case(
    case_id: int,
    request: CaseUpdateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> CaseResponse:
    """Partial update; only the supplied fields change."""
    case = CaseService.get_owned_case(db, case_id, current_user.user_id)
    data = request.model_dump(exclude_unset=True)
    _split_demographics(data)
    case = CaseService.update_case(db, case, data)
    return CaseResponse.model_validate(case)


@router.patch("/cases/{case_id}/complete", summary="Complete case", response_model=CaseResponse)
async def complete_case(
    case_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> CaseResponse:
    """Set status to completed and end time to now, whatever the current state."""
    case = CaseService.get_owned_case(db, case_id, current_user.user_id)
    return CaseResponse.model_validate(CaseService.complete_case(db, case))


@router.delete("/cases/{case_id}", summary="Delete case", status_code=status.HTTP_204_NO_CONTENT)
async def delete_case(
    case_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Response:
    case = CaseService.get_owned_case(db, case_id, current_user.user_id)
    CaseService.delete_case(db, case)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/cases/{case_id}/photos", summary="List case photos", response_model=List[CasePhotoResponse])
async def list_case_photos(
    case_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[CasePhotoResponse]:
    CaseService.get_owned_case(db, case_id, current_user.user_id)
    return [to_photo_response(photo) for photo in CasePhotoService.list_photos(db, case_id)]


@router.post(
    "/cases/{case_id}/photos",
    summary="Upload case photo",
    response_model=CasePhotoResponse,
    status_code=status.HTTP_201_CREATED
)
async def upload_case_photo(
    case_id: int,
    case_photo: UploadFile = File(..., alias="casePhoto"),
    description: Optional[str] = Form(None),
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> CasePhotoResponse:
    """Attach an image (max size per MAX_UPLOAD_SIZE_MB) to one of the user's cases."""
    CaseService.get_owned_case(db, case_id, current_user.user_id)
    photo = await CasePhotoService.upload_photo(db, case_id, current_user.user_id, case_photo, description)
    return to_photo_response(photo)


@router.delete(
    "/cases/{case_id}/photos/{photo_id}",
    summary="Delete case photo",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_case_photo(
    case_id: int,
    photo_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Response:
    CaseService.get_owned_case(db, case_id, current_user.user_id)
    photo = CasePhotoService.get_photo(db, case_id, photo_id)
    CasePhotoService.delete_photo(db, photo)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
