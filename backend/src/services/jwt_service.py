"""
Session token service.

Session tokens and the OAuth ``state`` parameter are both HS256 tokens signed
with ``SESSION_SECRET``. A ``typ`` claim keeps the two apart, so a login state
can never be replayed as a session.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from pydantic import BaseModel, ValidationError

from core.config import SESSION_SECRET, SESSION_TTL_DAYS

logger = logging.getLogger(__name__)

SESSION_TOKEN_TYPE = "session"
OAUTH_STATE_TYPE = "oauth_state"
_REGISTERED_CLAIMS = ("iat", "exp", "typ")


class TokenPayload(BaseModel):
    """Identity claims carried by a session token."""
    sub: str  # Identity provider subject
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    iat: Optional[int] = None
    exp: Optional[int] = None


class JWTService:

    ALGORITHM = "HS256"
    SESSION_TTL_DAYS = SESSION_TTL_DAYS
    OAUTH_STATE_EXPIRE_MINUTES = 10

    @classmethod
    def _sign(cls, claims: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
        issued_at = datetime.now(timezone.utc)
        body = {**claims, "typ": token_type, "iat": issued_at, "exp": issued_at + lifetime}
        return jwt.encode(body, SESSION_SECRET, algorithm=cls.ALGORITHM)

    @classmethod
    def _decode(cls, token: str, token_type: str) -> Optional[Dict[str, Any]]:
        try:
            claims = jwt.decode(token, SESSION_SECRET, algorithms=[cls.ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.debug(f"Rejected expired {token_type} token")
            return None
        except jwt.InvalidTokenError:
            return None
        if claims.get("typ") != token_type:
            return None
        return claims

    @classmethod
    def create_access_token(cls, payload: TokenPayload) -> str:
        """Create a signed session token valid for SESSION_TTL_DAYS."""
        claims = payload.model_dump(exclude={"iat", "exp"})
        return cls._sign(claims, SESSION_TOKEN_TYPE, timedelta(days=cls.SESSION_TTL_DAYS))

    @classmethod
    def verify_token(cls, token: str) -> Optional[TokenPayload]:
        """Decode a session token. Returns None when invalid, expired or of another type."""
        claims = cls._decode(token, SESSION_TOKEN_TYPE)
        if claims is None:
            return None
        claims.pop("typ", None)
        try:
            return TokenPayload(**claims)
        except ValidationError:
            return None

    @classmethod
    def get_session_max_age(cls) -> int:
        """Session lifetime in seconds, for the cookie Max-Age."""
        return int(timedelta(days=cls.SESSION_TTL_DAYS).total_seconds())

    @classmethod
    def sign_oauth_state(cls, state_data: Dict[str, Any]) -> str:
        return cls._sign(state_data, OAUTH_STATE_TYPE, timedelta(minutes=cls.OAUTH_STATE_EXPIRE_MINUTES))

    @classmethod
    def verify_oauth_state(cls, signed_state: str) -> Optional[Dict[str, Any]]:
        """Decode a signed ``state``; only the caller's data is returned."""
        claims = cls._decode(signed_state, OAUTH_STATE_TYPE)
        if claims is None:
            return None
        return {k: v for k, v in claims.items() if k not in _REGISTERED_CLAIMS}


jwt_service = JWTService()
