"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255

# OAuth and authentication
OIDC_SCOPES = [
    "openid",
    "profile",
    "email"
]
SESSION_COOKIE_NAME = "session_token"

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite)
    FRONTEND_URL,
]

CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Roles and enumerations
USER_ROLES = ("user", "admin")
THEMES = ("light", "dark")
CASE_STATUSES = ("in_progress", "completed", "cancelled")

# List limits
PATIENT_LIST_LIMIT = 50
SEARCH_RESULT_LIMIT = 20
PROCEDURE_LIST_LIMIT = 100
CASE_LIST_LIMIT = 50
EXPORT_MAX_CASES = 10000
TOP_PROCEDURES_LIMIT = 10

# Case photos
ALLOWED_IMAGE_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/bmp",
    "image/tiff",
)
CASE_PHOTO_PREFIX = "case"
PROFILE_PICTURE_PREFIX = "profile"

# Export
EXPORT_FORMATS = ("csv", "json", "pdf")
EXPORT_TYPES = ("summary", "detailed", "logbook", "raw")
LOGBOOK_PROCEDURE_MAX_CHARS = 30

DEFAULT_NOTIFICATION_SETTINGS = {
    "emailNotifications": True,
    "pushNotifications": False,
    "weeklyReports": True,
}
