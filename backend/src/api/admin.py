# pyright: reportMissingTypeStubs=false
"""
Admin API endpoints.

Every route requires the admin role, which is re-read from the database on
each request. Admins see all users and all cases regardless of ownership.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import (
    AdminUserResponse,
    CamelModel,
    CaseResponse,
    SystemStatsResponse,
    UserStatsResponse,
)
from api.shared import validate_optional_text
from auth.dependencies import UserContext, require_admin_role
from core.constants import CASE_LIST_LIMIT
from core.database import get_db
from models import User
from services.analytics_service import AnalyticsService
from services.case_service import CaseService
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


class AdminUserUpdateRequest(CamelModel):
    """Fields an admin may change on any user."""
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: Optional[str] = None
    specialty: Optional[str] = None
    license_number: Optional[str] = None
    institution: Optional[str] = None
    is_active: Optional[bool] = None
    theme_preference: Optional[str] = None

    @field_validator("email", "first_name", "last_name", "specialty", "license_number", "institution")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_text(v)


def _admin_user_response(user: User, cases_count: int) -> AdminUserResponse:
    response = AdminUserResponse.model_validate(user)
    response.cases_count = cases_count
    return response


@router.get("/users", summary="List all users", response_model=List[AdminUserResponse])
async def list_users(
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> List[AdminUserResponse]:
    """All users, newest first, with their case counts."""
    return [_admin_user_response(user, count) for user, count in UserService.get_all_users(db)]


@router.get("/users/{user_id}", summary="Get user", response_model=AdminUserResponse)
async def get_user(
    user_id: str,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> AdminUserResponse:
    user = UserService.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return _admin_user_response(user, UserService.count_cases(db, user_id))


@router.patch("/users/{user_id}", summary="Update user", response_model=AdminUserResponse)
async def update_user(
    user_id: str,
    request: AdminUserUpdateRequest,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> AdminUserResponse:
    """
    Edit any user, including role and active flag.

    An invalid role or theme is rejected with 400.
    """
    updates = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
    user = UserService.admin_update_user(db, user_id, updates)
    logger.info(f"Admin {current_user.user_id} updated user {user_id}")
    return _admin_user_response(user, UserService.count_cases(db, user_id))


@router.get("/user-cases/{user_id}", summary="List a user's cases", response_model=List[CaseResponse])
async def list_user_cases(
    user_id: str,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db),
    limit: int = Query(CASE_LIST_LIMIT, ge=1, le=1000),
    offset: int = Query(0, ge=0)
) -> List[CaseResponse]:
    return [CaseResponse.model_validate(case) for case in CaseService.list_cases(db, user_id, limit, offset)]


@router.get("/stats/users", summary="User statistics", response_model=UserStatsResponse)
async def get_user_stats(
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> UserStatsResponse:
    return UserStatsResponse.model_validate(UserService.get_user_stats(db))


@router.get("/stats/system", summary="System statistics", response_model=SystemStatsResponse)
async def get_system_stats(
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> SystemStatsResponse:
    return SystemStatsResponse.model_validate(AnalyticsService.get_system_stats(db))


@router.get("/cases", summary="List all cases", response_model=List[CaseResponse])
async def list_all_cases(
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db),
    limit: Optional[int] = Query(None, ge=1, le=10000),
    offset: Optional[int] = Query(None, ge=0)
) -> List[CaseResponse]:
    """Cases across every user, newest first."""
    return [CaseResponse.model_validate(case) for case in CaseService.list_all_cases(db, limit, offset)]


@router.get("/cases/{case_id}", summary="Get any case", response_model=CaseResponse)
async def get_any_case(
    case_id: int,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> CaseResponse:
    case = CaseService.get_case(db, case_id)
    if not case:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Case not found")
    return CaseResponse.model_validate(case)
