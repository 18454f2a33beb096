"""
Integration tests for authentication endpoints and session handling.
"""

from unittest.mock import AsyncMock, patch

import httpx

from core.config import FRONTEND_URL
from models import User
from services.jwt_service import TokenPayload
from services.oidc_service import oidc_service
from tests.utils import create_session_token, create_user, png_bytes


class TestSessionAuthentication:

    def test_missing_credentials(self, client):
        response = client.get("/api/auth/user")
        assert response.status_code == 401
        assert response.json()["message"] == "Authentication credentials not provided"

    def test_invalid_token(self, client):
        response = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired session"

    def test_cookie_session(self, client, user, auth_headers):
        token = auth_headers["Authorization"].split(" ", 1)[1]
        client.cookies.set("session_token", token)

        response = client.get("/api/auth/user")

        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    def test_first_request_creates_user(self, client, db_session):
        token = create_session_token("oidc|new", "new@example.com", "New", "Person")
        response = client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["role"] == "user"
        assert response.json()["themePreference"] == "dark"
        assert db_session.get(User, "oidc|new") is not None

    def test_deactivated_user_rejected(self, client, db_session, headers_for):
        inactive = create_user(db_session, "oidc|gone", "gone@example.com", is_active=False)

        response = client.get("/api/auth/user", headers=headers_for(inactive))

        assert response.status_code == 403
        assert response.json()["message"] == "Account is deactivated"


class TestProfile:

    def test_update_profile(self, client, auth_headers):
        response = client.patch(
            "/api/auth/user",
            json={"specialty": " Cardiac ", "institution": "General Hospital"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["specialty"] == "Cardiac"
        assert response.json()["institution"] == "General Hospital"

    def test_update_profile_without_fields(self, client, auth_headers):
        response = client.patch("/api/auth/user", json={}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields to update"

    def test_profile_picture(self, client, auth_headers):
        files = {"profilePicture": ("me.png", png_bytes(), "image/png")}

        response = client.post("/api/auth/profile-picture", files=files, headers=auth_headers)

        assert response.status_code == 200
        url = response.json()["profileImageUrl"]
        assert url.startswith("/api/uploads/profile-")
        assert client.get(url).status_code == 200


class TestTheme:

    def test_valid_theme(self, client, auth_headers):
        response = client.patch("/api/auth/theme", json={"theme": "light"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["themePreference"] == "light"

    def test_invalid_theme_leaves_preference(self, client, auth_headers, db_session, user):
        for bad in ("blue", "", None, 1, ["dark"]):
            response = client.patch("/api/auth/theme", json={"theme": bad}, headers=auth_headers)
            assert response.status_code == 400
            assert response.json()["message"] == "Invalid theme"

        db_session.refresh(user)
        assert user.theme_preference == "dark"


class TestLoginFlow:

    def test_login_redirects_to_provider(self, client):
        auth_url = "https://idp.example.com/authorize?client_id=caselog"
        with patch.object(oidc_service, "get_authorization_url", new=AsyncMock(return_value=auth_url)):
            response = client.get("/api/auth/login", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == auth_url

    def test_login_provider_unavailable(self, client):
        failing = AsyncMock(side_effect=httpx.ConnectError("unreachable"))
        with patch.object(oidc_service, "get_authorization_url", new=failing):
            response = client.get("/api/auth/login", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND_URL.rstrip('/')}/?error=auth_unavailable"

    def test_callback_sets_session_cookie(self, client, db_session):
        claims = TokenPayload(sub="oidc|carol", email="carol@example.com", first_name="Carol", last_name="Diaz")
        with patch.object(oidc_service, "parse_state", return_value={"return_to": "/cases"}), \
                patch.object(oidc_service, "handle_callback", new=AsyncMock(return_value=claims)):
            response = client.get(
                "/api/auth/callback", params={"code": "abc", "state": "signed"}, follow_redirects=False
            )

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND_URL.rstrip('/')}/cases"
        assert "session_token=" in response.headers["set-cookie"]
        assert "httponly" in response.headers["set-cookie"].lower()
        assert db_session.get(User, "oidc|carol").email == "carol@example.com"

    def test_callback_rejects_bad_state(self, client):
        with patch.object(oidc_service, "parse_state", side_effect=ValueError("bad signature")):
            response = client.get(
                "/api/auth/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False
            )

        assert response.status_code == 302
        assert response.headers["location"].endswith("error=invalid_state")

    def test_callback_without_code(self, client):
        response = client.get("/api/auth/callback", follow_redirects=False)
        assert response.headers["location"].endswith("error=missing_code")

    def test_logout_clears_cookie(self, client):
        response = client.get("/api/auth/logout", follow_redirects=False)

        assert response.status_code == 302
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("session_token=")
        assert "Max-Age=0" in cookie

    def test_legacy_callback_keeps_query(self, client):
        response = client.get(
            "/cases/api/auth/callback", params={"code": "abc", "state": "xyz"}, follow_redirects=False
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/api/auth/callback?code=abc&state=xyz"


class TestDevLogin:

    def test_disabled_by_default(self, client):
        response = client.post("/api/auth/dev/login", json={"email": "dev@example.com"})
        assert response.status_code == 404

    def test_enabled(self, client, monkeypatch):
        monkeypatch.setattr("api.auth.DEV_LOGIN_ENABLED", True)

        response = client.post(
            "/api/auth/dev/login", json={"sub": "dev|1", "email": "dev@example.com", "firstName": "Dev"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == "dev|1"
        me = client.get("/api/auth/user", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.json()["firstName"] == "Dev"
