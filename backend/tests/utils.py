"""
Test utilities for case log tests.
"""

import io
from typing import Dict, Optional

from PIL import Image
from sqlalchemy.orm import Session

from models import User
from services.jwt_service import TokenPayload, jwt_service


def create_session_token(
    sub: str,
    email: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> str:
    """Create a session token the way the login callback does."""
    payload = TokenPayload(sub=sub, email=email, first_name=first_name, last_name=last_name)
    return jwt_service.create_access_token(payload)


def auth_headers_for(user: User) -> Dict[str, str]:
    """Bearer headers for an existing user."""
    token = create_session_token(user.id, user.email, user.first_name, user.last_name)
    return {"Authorization": f"Bearer {token}"}


def png_bytes(width: int = 8, height: int = 8, color: str = "red") -> bytes:
    """A small, valid PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return buffer.getvalue()


def create_user(
    db_session: Session,
    sub: str,
    email: str,
    role: str = "user",
    is_active: bool = True,
    first_name: str = "Test",
    last_name: str = "User",
) -> User:
    """Insert a user row directly."""
    user = User(
        id=sub,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user
