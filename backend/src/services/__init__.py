"""
Services package for shared business logic.

This package contains service classes that encapsulate business logic
shared across multiple API endpoints.
"""

from .user_service import UserService
from .patient_service import PatientService
from .surgeon_service import SurgeonService
from .procedure_service import ProcedureService
from .case_service import CaseService
from .case_photo_service import CasePhotoService
from .case_template_service import CaseTemplateService
from .preferences_service import PreferencesService
from .analytics_service import AnalyticsService
from .export_service import ExportService

__all__ = [
    "UserService",
    "PatientService",
    "SurgeonService",
    "ProcedureService",
    "CaseService",
    "CasePhotoService",
    "CaseTemplateService",
    "PreferencesService",
    "AnalyticsService",
    "ExportService",
]
