# Package initialization
# Import all models to ensure relationships are properly established
from .user import User
from .patient import Patient
from .surgeon import Surgeon
from .procedure import Procedure
from .case import Case
from .case_template import CaseTemplate
from .case_photo import CasePhoto
from .user_preferences import UserPreferences

__all__ = [
    "User",
    "Patient",
    "Surgeon",
    "Procedure",
    "Case",
    "CaseTemplate",
    "CasePhoto",
    "UserPreferences",
]
