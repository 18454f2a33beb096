"""
Integration tests for case photo upload, listing and deletion.
"""

import pytest

from models import CasePhoto
from utils.file_storage import MAX_UPLOAD_BYTES, resolve_upload_path
from tests.utils import png_bytes


@pytest.fixture
def case_id(client, auth_headers, sample_case_data):
    return client.post("/api/cases", json=sample_case_data, headers=auth_headers).json()["id"]


class TestCasePhotos:

    def test_upload_list_delete(self, client, auth_headers, case_id):
        response = client.post(
            f"/api/cases/{case_id}/photos",
            files={"casePhoto": ("airway.png", png_bytes(), "image/png")},
            data={"description": "Grade 1 view"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        photo = response.json()
        assert photo["caseId"] == case_id
        assert photo["mimeType"] == "image/png"
        assert photo["description"] == "Grade 1 view"
        assert photo["uploadedBy"] == "oidc|alice"
        stored = resolve_upload_path(photo["fileName"])
        assert stored.exists()

        listed = client.get(f"/api/cases/{case_id}/photos", headers=auth_headers).json()
        assert [item["id"] for item in listed] == [photo["id"]]

        deleted = client.delete(f"/api/cases/{case_id}/photos/{photo['id']}", headers=auth_headers)
        assert deleted.status_code == 204
        assert not stored.exists()
        assert client.get(f"/api/cases/{case_id}/photos", headers=auth_headers).json() == []

    def test_too_large(self, client, auth_headers, case_id):
        oversized = b"\0" * (MAX_UPLOAD_BYTES + 1)

        response = client.post(
            f"/api/cases/{case_id}/photos",
            files={"casePhoto": ("huge.png", oversized, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 413
        assert response.json()["message"] == "File too large (max 10MB)"

    def test_non_image_type(self, client, auth_headers, case_id):
        response = client.post(
            f"/api/cases/{case_id}/photos",
            files={"casePhoto": ("report.pdf", b"%PDF-1.4", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed"

    def test_corrupt_image(self, client, auth_headers, case_id):
        response = client.post(
            f"/api/cases/{case_id}/photos",
            files={"casePhoto": ("fake.jpg", b"not really a jpeg", "image/jpeg")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid image file"

    def test_missing_photo(self, client, auth_headers, case_id):
        response = client.delete(f"/api/cases/{case_id}/photos/999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Photo not found"

    def test_photos_survive_case_deletion(self, client, auth_headers, case_id, db_session):
        client.post(
            f"/api/cases/{case_id}/photos",
            files={"casePhoto": ("airway.png", png_bytes(), "image/png")},
            headers=auth_headers,
        )

        assert client.delete(f"/api/cases/{case_id}", headers=auth_headers).status_code == 204
        assert db_session.query(CasePhoto).filter(CasePhoto.case_id == case_id).count() == 1
