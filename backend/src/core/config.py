"""
Runtime settings read from the environment.

A ``.env`` file in ``backend/`` or the repository root is loaded with
python-dotenv before the values below are read. Under pytest no file is
loaded, so the test run only sees the defaults and whatever the suite sets.
"""

import os
import pathlib

from dotenv import load_dotenv

_BACKEND_DIR = pathlib.Path(__file__).resolve().parents[2]
_TRUTHY = {"1", "true", "yes", "on"}


def _load_env_file() -> None:
    if os.getenv("PYTEST_VERSION") is not None:
        return
    for candidate in (_BACKEND_DIR / ".env", _BACKEND_DIR.parent / ".env", pathlib.Path.cwd() / ".env"):
        if candidate.exists():
            load_dotenv(candidate)
            return


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return default if raw in (None, "") else int(raw)


_load_env_file()

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://localhost/caselog_dev")
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Identity provider (any OpenID Connect issuer with a discovery document)
OIDC_ISSUER_URL = os.getenv("OIDC_ISSUER_URL", "https://accounts.google.com")
OIDC_CLIENT_ID = os.getenv("OIDC_CLIENT_ID", "")
OIDC_CLIENT_SECRET = os.getenv("OIDC_CLIENT_SECRET", "")

SESSION_SECRET = os.getenv("SESSION_SECRET", "dev-secret-key-change-in-production")
SESSION_TTL_DAYS = env_int("SESSION_TTL_DAYS", 7)
SESSION_COOKIE_SECURE = env_flag("SESSION_COOKIE_SECURE", default=ENVIRONMENT == "production")
DEV_LOGIN_ENABLED = env_flag("DEV_LOGIN_ENABLED")

SETUP_SECRET = os.getenv("SETUP_SECRET", "setup-admin-2024")

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_SIZE_MB = env_int("MAX_UPLOAD_SIZE_MB", 10)
