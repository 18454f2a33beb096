# pyright: reportMissingTypeStubs=false
"""
Authentication API endpoints.

Handles the OpenID Connect login round trip, logout, the development login,
and the authenticated user's own profile, theme and profile picture.
"""

import logging
import secrets
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile, status
from fastapi.responses import RedirectResponse
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import CamelModel, UserResponse
from api.shared import validate_optional_text
from auth.dependencies import UserContext, get_current_user
from core.config import DEV_LOGIN_ENABLED, FRONTEND_URL, SESSION_COOKIE_SECURE
from core.constants import ALLOWED_IMAGE_MIME_TYPES, PROFILE_PICTURE_PREFIX, SESSION_COOKIE_NAME
from core.database import get_db
from services.jwt_service import TokenPayload, jwt_service
from services.oidc_service import oidc_service
from services.user_service import UserService
from utils.file_storage import delete_file, file_url, save_upload_file, verify_image

logger = logging.getLogger(__name__)

router = APIRouter()
legacy_router = APIRouter()


class ProfileUpdateRequest(CamelModel):
    """Self-editable profile fields."""
    specialty: Optional[str] = None
    license_number: Optional[str] = None
    institution: Optional[str] = None
    profile_image_url: Optional[str] = None

    @field_validator("specialty", "license_number", "institution", "profile_image_url")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_text(v)


class ThemeUpdateRequest(CamelModel):
    theme: Optional[Any] = None


class DevLoginRequest(CamelModel):
    """Development-only login; mints a session for arbitrary claims."""
    sub: Optional[str] = None
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class SessionResponse(CamelModel):
    token: str
    user: UserResponse


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=jwt_service.get_session_max_age(),
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def _frontend_redirect(path: str = "/", **params: str) -> RedirectResponse:
    # Only same-site relative paths are honored
    if not path.startswith("/") or path.startswith("//"):
        path = "/"
    url = f"{FRONTEND_URL.rstrip('/')}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


@router.get("/login", summary="Initiate identity provider login")
async def login(return_to: Optional[str] = Query(None, alias="returnTo")) -> RedirectResponse:
    """Redirect the browser to the identity provider's authorization endpoint."""
    try:
        auth_url = await oidc_service.get_authorization_url(return_to)
    except httpx.HTTPError as e:
        logger.exception(f"Failed to load identity provider metadata: {e}")
        return _frontend_redirect(error="auth_unavailable")
    return RedirectResponse(url=auth_url, status_code=302)


@router.get("/callback", summary="Handle identity provider callback")
async def auth_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(get_db)
) -> RedirectResponse:
    """
    Complete the login round trip.

    Exchanges the authorization code, upserts the user from the returned
    claims, sets the session cookie and redirects back to the frontend.
    """
    if error:
        logger.warning(f"Identity provider returned error: {error}")
        return _frontend_redirect(error=error)
    if not code or not state:
        return _frontend_redirect(error="missing_code")

    try:
        state_data = oidc_service.parse_state(state)
        claims = await oidc_service.handle_callback(code, state)
    except ValueError as e:
        logger.warning(f"Rejected login callback: {e}")
        return _frontend_redirect(error="invalid_state")
    except httpx.HTTPError as e:
        logger.exception(f"Token exchange failed: {e}")
        return _frontend_redirect(error="auth_failed")

    UserService.upsert_user_from_claims(
        db,
        sub=claims.sub,
        email=claims.email,
        first_name=claims.first_name,
        last_name=claims.last_name,
        profile_image_url=claims.profile_image_url,
    )
    token = jwt_service.create_access_token(claims)
    response = _frontend_redirect(str(state_data.get("return_to") or "/"))
    _set_session_cookie(response, token)
    logger.info(f"User {claims.sub} logged in")
    return response


@router.get("/logout", summary="Log out")
async def logout() -> RedirectResponse:
    """Clear the session cookie and return to the frontend."""
    response = _frontend_redirect()
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
    return response


@router.post("/dev/login", summary="Development login", response_model=SessionResponse)
async def dev_login(
    request: DevLoginRequest,
    response: Response,
    db: Session = Depends(get_db)
) -> SessionResponse:
    """Issue a session without the identity provider. Returns 404 unless DEV_LOGIN_ENABLED is set."""
    if not DEV_LOGIN_ENABLED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    claims = TokenPayload(
        sub=request.sub or f"dev-{secrets.token_hex(8)}",
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    user = UserService.upsert_user_from_claims(
        db,
        sub=claims.sub,
        email=claims.email,
        first_name=claims.first_name,
        last_name=claims.last_name,
    )
    token = jwt_service.create_access_token(claims)
    _set_session_cookie(response, token)
    logger.info(f"Development login for {claims.sub}")
    return SessionResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/user", summary="Get current user", response_model=UserResponse)
async def get_user(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserResponse:
    user = UserService.get_user(db, current_user.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.patch("/user", summary="Update current user profile", response_model=UserResponse)
async def update_user(
    request: ProfileUpdateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserResponse:
    """Update specialty, license number, institution or profile image URL."""
    user = UserService.update_profile(db, current_user.user_id, request.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.patch("/theme", summary="Update theme preference", response_model=UserResponse)
async def update_theme(
    request: ThemeUpdateRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserResponse:
    user = UserService.update_theme(db, current_user.user_id, request.theme)
    return UserResponse.model_validate(user)


@router.post("/profile-picture", summary="Upload profile picture", response_model=UserResponse)
async def upload_profile_picture(
    profile_picture: UploadFile = File(..., alias="profilePicture"),
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserResponse:
    """Store an uploaded image and point the user's profile image URL at it."""
    if (profile_picture.content_type or "").lower() not in ALLOWED_IMAGE_MIME_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed"
        )

    file_name, _ = await save_upload_file(profile_picture, PROFILE_PICTURE_PREFIX)
    try:
        verify_image(file_name)
    except HTTPException:
        delete_file(file_name)
        raise

    user = UserService.update_profile(db, current_user.user_id, {"profile_image_url": file_url(file_name)})
    return UserResponse.model_validate(user)


@legacy_router.get("/cases/api/auth/callback", include_in_schema=False)
async def legacy_auth_callback(request: Request) -> RedirectResponse:
    """Redirect callbacks registered under the old /cases prefix, keeping the query string."""
    query = request.url.query
    target = "/api/auth/callback" + (f"?{query}" if query else "")
    return RedirectResponse(url=target, status_code=302)
