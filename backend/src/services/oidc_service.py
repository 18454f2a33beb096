"""
OpenID Connect client for the login round trip.

Endpoints are read from the issuer's discovery document, so any compliant
provider (Google, Auth0, Keycloak, ...) works with just the issuer URL and
client credentials.
"""

import logging
import urllib.parse
from typing import Any, Dict, Optional

import httpx

from core.config import API_BASE_URL, OIDC_CLIENT_ID, OIDC_CLIENT_SECRET, OIDC_ISSUER_URL
from core.constants import OIDC_SCOPES
from services.jwt_service import TokenPayload, jwt_service

logger = logging.getLogger(__name__)


def claims_to_payload(user_info: Dict[str, Any]) -> TokenPayload:
    """
    Normalize provider userinfo claims into session claims.

    Raises:
        ValueError: If the provider did not return a subject
    """
    sub = user_info.get("sub")
    if not sub:
        raise ValueError("Identity provider returned no subject")
    return TokenPayload(
        sub=str(sub),
        email=user_info.get("email"),
        first_name=user_info.get("given_name") or user_info.get("first_name"),
        last_name=user_info.get("family_name") or user_info.get("last_name"),
        profile_image_url=user_info.get("picture"),
    )


class OIDCService:
    """Service for handling the OpenID Connect authorization code flow"""

    DISCOVERY_PATH = "/.well-known/openid-configuration"

    def __init__(self, redirect_uri: Optional[str] = None) -> None:
        self.issuer = OIDC_ISSUER_URL.rstrip("/")
        self.client_id = OIDC_CLIENT_ID
        self.client_secret = OIDC_CLIENT_SECRET
        self.redirect_uri = redirect_uri or f"{API_BASE_URL}/api/auth/callback"
        self._metadata: Optional[Dict[str, Any]] = None

    async def get_metadata(self) -> Dict[str, Any]:
        """Fetch (once) and return the provider discovery document."""
        if self._metadata is None:
            async with httpx.AsyncClient() as client:
                response = await client.get(f"{self.issuer}{self.DISCOVERY_PATH}")
                response.raise_for_status()
                self._metadata = response.json()
        return self._metadata

    async def get_authorization_url(self, return_to: Optional[str] = None) -> str:
        """Generate the provider authorization URL with a signed state"""
        metadata = await self.get_metadata()
        state = jwt_service.sign_oauth_state({"return_to": return_to or "/"})
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(OIDC_SCOPES),
            "response_type": "code",
            "state": state,
        }
        return f"{metadata['authorization_endpoint']}?{urllib.parse.urlencode(params)}"

    async def exchange_code_for_tokens(self, code: str) -> Dict[str, Any]:
        """Exchange authorization code for tokens"""
        metadata = await self.get_metadata()
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }
        async with httpx.AsyncClient() as client:
            response = await client.post(metadata["token_endpoint"], data=data)
            response.raise_for_status()
            return response.json()

    async def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """Get user claims from the userinfo endpoint"""
        metadata = await self.get_metadata()
        headers = {"Authorization": f"Bearer {access_token}"}
        async with httpx.AsyncClient() as client:
            response = await client.get(metadata["userinfo_endpoint"], headers=headers)
            response.raise_for_status()
            return response.json()

    def parse_state(self, state: str) -> Dict[str, Any]:
        state_data = jwt_service.verify_oauth_state(state)
        if state_data is None:
            raise ValueError("Invalid or expired OAuth state")
        return state_data

    async def handle_callback(self, code: str, state: str) -> TokenPayload:
        """
        Complete the login: verify state, exchange the code and read userinfo.

        Returns:
            Normalized session claims

        Raises:
            ValueError: For a bad state or missing subject
            httpx.HTTPError: If the provider rejects the exchange
        """
        self.parse_state(state)
        token_data = await self.exchange_code_for_tokens(code)
        user_info = await self.get_user_info(token_data["access_token"])
        logger.info(f"OIDC login completed for subject {user_info.get('sub')}")
        return claims_to_payload(user_info)


oidc_service = OIDCService()
