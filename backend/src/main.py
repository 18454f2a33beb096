# pyright: reportMissingTypeStubs=false
"""
Anesthesia Case Log API.

Anesthesiologists sign in through an OpenID Connect provider and keep a
personal log of their cases, with patients, surgeons, procedures, templates,
photos, statistics and exports. Administrators get a read-only view across
all users plus role management.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Tuple

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import admin, auth, case_templates, cases, export, patients, procedures, surgeons, system
from core.config import ENVIRONMENT
from core.constants import CORS_ORIGINS
from utils.file_storage import ensure_upload_dir

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

_UNAUTHORIZED = {401: {"description": "Session missing or invalid"}}
_OWNED_RESOURCE = {
    **_UNAUTHORIZED,
    403: {"description": "Account deactivated"},
    404: {"description": "Not found or not owned by the caller"},
}
_CONFLICT = {409: {"description": "Duplicate identifier"}}

# (router, prefix, tag, documented error responses)
ROUTES: List[Tuple[APIRouter, str, str, Dict[int | str, Dict[str, Any]]]] = [
    (auth.router, "/api/auth", "authentication", _UNAUTHORIZED),
    (patients.router, "/api", "patients", {**_OWNED_RESOURCE, **_CONFLICT}),
    (surgeons.router, "/api", "surgeons", _OWNED_RESOURCE),
    (procedures.router, "/api", "procedures", {**_OWNED_RESOURCE, **_CONFLICT}),
    (cases.router, "/api", "cases", {**_OWNED_RESOURCE, **_CONFLICT, 413: {"description": "Upload too large"}}),
    (case_templates.router, "/api", "templates", _OWNED_RESOURCE),
    (export.router, "/api", "export", {**_UNAUTHORIZED, 400: {"description": "Unknown export type or format"}}),
    (admin.router, "/api/admin", "admin", {**_OWNED_RESOURCE, 403: {"description": "Admin access required"}}),
    (system.router, "/api", "system", {**_UNAUTHORIZED, 403: {"description": "Wrong setup secret"}}),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Case Log API {API_VERSION} starting ({ENVIRONMENT})")
    try:
        logger.info(f"Uploads stored in {ensure_upload_dir()}")
    except OSError as e:
        logger.exception(f"Upload directory unavailable: {e}")
    yield
    logger.info("Case Log API stopped")


app = FastAPI(
    title="Case Log Backend",
    description="Anesthesia case logging, analytics and export",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

for router, prefix, tag, responses in ROUTES:
    app.include_router(router, prefix=prefix, tags=[tag], responses=responses)
# /cases/api/auth/callback redirect for providers registered with the old path
app.include_router(auth.legacy_router)


@app.get("/", summary="Service banner")
async def root() -> dict[str, str]:
    return {"message": "Case Log Backend API", "version": API_VERSION, "status": "running"}


@app.get("/health", summary="Liveness probe")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Pydantic error contexts may hold exceptions; keep only loc/msg/type
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        for error in errors
    ]


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every HTTP error body carries ``message``; ``detail`` mirrors it for older clients."""
    response = _error(exc.status_code, exc.detail, detail=exc.detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = list(exc.errors())
    logger.warning(f"Rejected {request.method} {request.url.path}: {errors}")
    return _error(400, "Validation error", details=_validation_details(errors))


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning(f"Invalid value on {request.url.path}: {exc}")
    return _error(400, "Validation error", details=[{"loc": [], "msg": str(exc), "type": "value_error"}])


@app.exception_handler(httpx.HTTPStatusError)
async def upstream_error_handler(request: Request, exc: httpx.HTTPStatusError):
    logger.exception(f"Identity provider returned {exc.response.status_code} for {exc.request.url}")
    return _error(502, "External service error")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return _error(500, "Internal server error")
