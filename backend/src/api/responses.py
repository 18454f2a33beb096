"""
Shared response models for API endpoints.

This module contains Pydantic response models that are shared across
multiple API endpoints to ensure consistency and reduce duplication.
All models serialize with camelCase keys.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python, ORM-readable."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserResponse(CamelModel):
    """Response model for a user profile."""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str = "user"
    specialty: Optional[str] = None
    license_number: Optional[str] = None
    institution: Optional[str] = None
    is_active: bool = True
    theme_preference: str = "dark"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminUserResponse(UserResponse):
    """User row as shown in the admin user list."""
    cases_count: int = 0
    last_login: Optional[datetime] = None


class PatientResponse(CamelModel):
    """Response model for patient information."""
    id: int
    patient_id: str
    first_name: str
    last_name: str = ""
    age: Optional[int] = None
    gender: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    bmi: Optional[float] = None
    allergies: Optional[str] = None
    medical_history: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SurgeonResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    specialty: Optional[str] = None
    institution: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime


class ProcedureResponse(CamelModel):
    id: int
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    complexity: Optional[str] = None
    created_at: datetime


class ProcedureSummary(CamelModel):
    """Procedure shape embedded in case responses."""
    id: int
    name: str
    category: Optional[str] = None


class CaseResponse(CamelModel):
    """Response model for a case, with the referenced procedure embedded."""
    id: int
    case_number: str
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    surgeon_name: Optional[str] = None
    procedure_id: Optional[int] = None
    custom_procedure_name: Optional[str] = None
    procedure_category: Optional[str] = None
    procedure: Optional[ProcedureSummary] = None
    anesthesiologist_id: str
    supervisor_id: Optional[str] = None
    anesthesia_type: str
    regional_block_type: Optional[str] = None
    custom_regional_block: Optional[str] = None
    asa_score: Optional[str] = None
    emergency_case: bool = False
    case_date: datetime
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
    status: str
    created_at: datetime
    updated_at: datetime


class CasePhotoResponse(CamelModel):
    id: int
    case_id: int
    file_name: str
    original_name: str
    mime_type: str
    size: int
    description: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: datetime
    url: Optional[str] = None


class CaseTemplateResponse(CamelModel):
    id: int
    name: str
    category: Optional[str] = None
    procedure_type: Optional[str] = None
    anesthesia_type: Optional[str] = None
    default_settings: Optional[Any] = None
    created_by: Optional[str] = None
    is_public: bool = False
    created_at: datetime


class UserPreferencesResponse(CamelModel):
    id: Optional[int] = None
    user_id: str
    default_anesthesia_type: Optional[str] = ""
    default_institution: Optional[str] = ""
    export_settings: Optional[Dict[str, Any]] = None
    dashboard_settings: Optional[Dict[str, Any]] = None
    notification_settings: Optional[Dict[str, Any]] = None


class AnesthesiaTypeCount(CamelModel):
    anesthesia_type: str
    count: int


class CaseStatsResponse(CamelModel):
    """Per-user case aggregates for the dashboard."""
    total_cases: int
    cases_this_month: int
    cases_by_type: List[AnesthesiaTypeCount]
    avg_duration: float
    """Mean of end_time - start_time in minutes over cases having both."""


class LabelCount(CamelModel):
    label: str
    count: int


class CaseAnalyticsResponse(CamelModel):
    total_cases: int
    completed_cases: int
    in_progress_cases: int
    emergency_cases: int
    avg_duration: float
    cases_by_month: List[LabelCount]
    cases_by_type: List[LabelCount]
    cases_by_day: List[LabelCount]
    cases_by_asa: List[LabelCount]
    procedure_frequency: List[LabelCount]


class RoleCount(CamelModel):
    role: str
    count: int


class UserStatsResponse(CamelModel):
    total_users: int
    active_users: int
    inactive_users: int
    admin_users: int
    recent_registrations: int
    users_by_role: List[RoleCount]
    users_by_specialty: List[LabelCount]
    users_by_institution: List[LabelCount]


class SystemStatsResponse(CamelModel):
    total_cases: int
    total_patients: int
    total_surgeons: int
    total_procedures: int


class SetupResponse(CamelModel):
    message: str
    procedures_added: int
    admin_set: bool


class InitProceduresResponse(CamelModel):
    message: str
    total: int
    created: int
    categories: List[str]


class SuccessResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
