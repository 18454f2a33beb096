# pyright: reportMissingTypeStubs=false
"""
Case template and user preference API endpoints.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import CamelModel, CaseTemplateResponse, UserPreferencesResponse
from api.shared import validate_optional_text, validate_required_text
from auth.dependencies import UserContext, get_current_user
from core.database import get_db
from services.case_template_service import CaseTemplateService
from services.preferences_service import PreferencesService

logger = logging.getLogger(__name__)

router = APIRouter()


class CaseTemplateCreateRequest(CamelModel):
    name: str
    category: Optional[str] = None
    procedure_type: Optional[str] = None
    anesthesia_type: Optional[str] = None
    default_settings: Optional[Dict[str, Any]] = None
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_required_text(v)

    @field_validator("category", "procedure_type", "anesthesia_type")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_text(v)


class UserPreferencesUpdateRequest(CamelModel):
    default_anesthesia_type: Optional[str] = None
    default_institution: Optional[str] = None
    export_settings: Optional[Dict[str, Any]] = None
    dashboard_settings: Optional[Dict[str, Any]] = None
    notification_settings: Optional[Dict[str, Any]] = None


@router.get("/case-templates", summary="List case templates", response_model=List[CaseTemplateResponse])
async def list_case_templates(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[CaseTemplateResponse]:
    """The user's own templates and all public templates, by name."""
    return [
        CaseTemplateResponse.model_validate(template)
        for template in CaseTemplateService.list_templates(db, current_user.user_id)
    ]


@router.post(
    "/case-templates",
    summary="Create case template",
    response_model=CaseTemplateResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_case_template(
    request: CaseTemplateCreateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> CaseTemplateResponse:
    template = CaseTemplateService.create_template(db, current_user.user_id, request.model_dump())
    return CaseTemplateResponse.model_validate(template)


@router.delete(
    "/case-templates/{template_id}",
    summary="Delete case template",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_case_template(
    template_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Response:
    CaseTemplateService.delete_template(db, template_id, current_user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/user-preferences", summary="Get user preferences", response_model=UserPreferencesResponse)
async def get_user_preferences(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserPreferencesResponse:
    """Stored preferences, or the defaults when the user has saved none."""
    preferences = PreferencesService.get_preferences(db, current_user.user_id)
    return UserPreferencesResponse.model_validate(preferences)


@router.put("/user-preferences", summary="Save user preferences", response_model=UserPreferencesResponse)
async def update_user_preferences(
    request: UserPreferencesUpdateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserPreferencesResponse:
    preferences = PreferencesService.upsert_preferences(
        db, current_user.user_id, request.model_dump(exclude_unset=True)
    )
    return UserPreferencesResponse.model_validate(preferences)
