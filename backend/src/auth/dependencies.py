# pyright: reportMissingTypeStubs=false
"""
Request authentication for the API routers.

A request is authenticated by the signed session token, taken from the
``session_token`` cookie set at login or, for scripted clients, from an
``Authorization: Bearer`` header. The users row is kept in step with the
token's identity claims, and the stored role decides admin access.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.constants import SESSION_COOKIE_NAME
from core.database import get_db
from models import User
from services.jwt_service import TokenPayload, jwt_service
from services.user_service import UserService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class UserContext:
    """The caller of the current request."""

    def __init__(
        self,
        sub: str,
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        role: str = "user",
    ):
        self.sub = sub
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.role = role

    @classmethod
    def from_user(cls, user: User) -> "UserContext":
        return cls(
            sub=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )

    @property
    def user_id(self) -> str:
        """Owner key for every per-user row (the identity provider subject)."""
        return self.sub

    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"UserContext(sub='{self.sub}', role='{self.role}')"


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    cookie_token = request.cookies.get(SESSION_COOKIE_NAME)
    if cookie_token:
        return cookie_token
    return credentials.credentials if credentials else None


def get_token_payload(token: Optional[str] = Depends(get_session_token)) -> Optional[TokenPayload]:
    return jwt_service.verify_token(token) if token else None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    payload: Optional[TokenPayload] = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> UserContext:
    """
    Resolve the session to a user, creating the row on first sight.

    Raises 401 without a usable token and 403 for a deactivated account.
    """
    if not token:
        raise _unauthorized("Authentication credentials not provided")
    if payload is None:
        raise _unauthorized("Invalid or expired session")

    try:
        user = UserService.upsert_user_from_claims(
            db,
            sub=payload.sub,
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            profile_image_url=payload.profile_image_url,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Could not sync user {payload.sub} from session claims: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load user")

    if not user.is_active:
        logger.info(f"Deactivated user {user.id} refused")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

    return UserContext.from_user(user)


def require_admin_role(
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserContext:
    """Admin gate. The role is read from the database, never from the token."""
    stored = UserService.get_user(db, user.sub)
    if stored is None or stored.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
