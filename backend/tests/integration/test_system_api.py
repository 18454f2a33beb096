"""
Integration tests for setup, contact and upload serving.
"""

from core.procedure_catalog import DEFAULT_PROCEDURES
from models import Procedure
from utils.file_storage import ensure_upload_dir
from tests.utils import png_bytes


class TestSetup:

    def test_wrong_secret(self, client, user, db_session):
        response = client.post("/api/setup", json={"email": user.email, "secret": "guess"})

        assert response.status_code == 403
        assert response.json()["message"] == "Invalid setup secret"
        db_session.refresh(user)
        assert user.role == "user"

    def test_missing_secret(self, client):
        assert client.post("/api/setup", json={}).status_code == 403

    def test_promotes_and_seeds(self, client, user, db_session):
        response = client.post("/api/setup", json={"email": user.email, "secret": "test-setup-secret"})

        assert response.status_code == 200
        assert response.json() == {
            "message": "Setup completed successfully",
            "proceduresAdded": len(DEFAULT_PROCEDURES),
            "adminSet": True,
        }
        db_session.refresh(user)
        assert user.role == "admin"

    def test_repeat_is_idempotent(self, client, db_session):
        body = {"secret": "test-setup-secret"}
        client.post("/api/setup", json=body)

        response = client.post("/api/setup", json=body)

        assert response.json()["proceduresAdded"] == 0
        assert response.json()["adminSet"] is False
        assert db_session.query(Procedure).count() == len(DEFAULT_PROCEDURES)

    def test_unknown_email(self, client):
        response = client.post("/api/setup", json={"email": "nobody@example.com", "secret": "test-setup-secret"})
        assert response.json()["adminSet"] is False


class TestContact:

    def test_requires_session(self, client):
        response = client.post(
            "/api/contact",
            json={"name": "Jo", "email": "jo@example.com", "subject": "Hi", "message": "Hello"},
        )
        assert response.status_code == 401

    def test_all_fields_required(self, client, auth_headers):
        response = client.post(
            "/api/contact",
            json={"name": "Jo", "email": "jo@example.com", "subject": "Hi", "message": "  "},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "All fields are required"

    def test_success(self, client, auth_headers):
        response = client.post(
            "/api/contact",
            json={"name": "Jo", "email": "jo@example.com", "subject": "Feature", "message": "Add CPT codes"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Your message has been sent successfully. We'll get back to you soon!",
        }


class TestUploads:

    def test_serves_stored_file(self, client):
        (ensure_upload_dir() / "case-served.png").write_bytes(png_bytes())

        response = client.get("/api/uploads/case-served.png")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"

    def test_missing_file(self, client):
        response = client.get("/api/uploads/nope.png")
        assert response.status_code == 404
        assert response.json()["message"] == "File not found"

    def test_traversal_rejected(self, client):
        assert client.get("/api/uploads/..%2Fconftest.py").status_code == 404


class TestHealth:

    def test_root_and_health(self, client):
        assert client.get("/").json()["status"] == "running"
        assert client.get("/health").json() == {"status": "healthy"}
