"""
The cached API client against the real application.

Reads are served from the cache until a mutation invalidates the affected
resource families; after any successful write the next read reflects it.
"""

import csv
import io
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from client import ApiError, AuthenticationRequired, CaseLogClient
from client.query_cache import make_key
from main import app
from models import Case
from tests.utils import png_bytes


@pytest.fixture
def api(client, auth_headers):
    # ``client`` installs the test database override
    return CaseLogClient(TestClient(app, headers=auth_headers))


class TestCacheCoherence:

    def test_repeat_reads_hit_cache(self, api, db_session, user):
        assert api.list_cases() == []
        assert make_key("/api/cases") in api.cache

        db_session.add(Case(
            case_number="CC-OUTSIDE",
            anesthesiologist_id=user.id,
            anesthesia_type="General anesthesia",
            case_date=datetime(2024, 1, 1),
        ))
        db_session.commit()

        # Written behind the client's back: the cached result is still served
        assert api.list_cases() == []

    def test_create_case_refreshes_lists_and_stats(self, api):
        assert api.list_cases() == []
        assert api.case_stats()["totalCases"] == 0
        api.list_templates()

        created = api.create_case({"anesthesiaType": "General anesthesia", "caseDate": "2024-01-15"})

        assert [case["id"] for case in api.list_cases()] == [created["id"]]
        assert api.case_stats()["totalCases"] == 1
        assert make_key("/api/case-templates") in api.cache

    def test_case_with_patient_refreshes_patients(self, api):
        assert api.list_patients() == []

        api.create_case({
            "anesthesiaType": "General anesthesia",
            "caseDate": "2024-01-15",
            "patientId": "PT-77",
            "patientName": "Jane Doe",
        })

        assert [patient["patientId"] for patient in api.list_patients()] == ["PT-77"]

    def test_complete_and_delete_refresh_case(self, api):
        created = api.create_case(
            {"anesthesiaType": "General anesthesia", "caseDate": "2024-01-15", "status": "in_progress"}
        )
        assert api.get_case(created["id"])["status"] == "in_progress"

        api.complete_case(created["id"])
        assert api.get_case(created["id"])["status"] == "completed"

        api.delete_case(created["id"])
        with pytest.raises(ApiError) as exc_info:
            api.get_case(created["id"])
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Case not found"

    def test_multipart_create_and_photos(self, api):
        created = api.create_case(
            {"anesthesiaType": "Regional blocks", "caseDate": "2024-01-15", "emergencyCase": True},
            photo=("block.png", png_bytes(), "image/png"),
        )
        assert created["emergencyCase"] is True

        photos = api.list_case_photos(created["id"])
        assert len(photos) == 1

        api.delete_case_photo(created["id"], photos[0]["id"])
        assert api.list_case_photos(created["id"]) == []

    def test_resource_families(self, api):
        assert api.list_surgeons() == []
        api.create_surgeon({"firstName": "Derek", "lastName": "Shepherd"})
        assert len(api.list_surgeons()) == 1

        assert api.get_preferences()["defaultInstitution"] == ""
        api.save_preferences({"defaultInstitution": "Grey Sloan"})
        assert api.get_preferences()["defaultInstitution"] == "Grey Sloan"

        assert api.current_user()["themePreference"] == "dark"
        api.update_theme("light")
        assert api.current_user()["themePreference"] == "light"

    def test_failed_mutation_keeps_cache(self, api):
        api.list_cases()

        with pytest.raises(ApiError) as exc_info:
            api.update_theme("sepia")

        assert exc_info.value.status_code == 400
        assert make_key("/api/cases") in api.cache


class TestClientErrors:

    def test_authentication_required(self, client):
        anonymous = CaseLogClient(client)

        with pytest.raises(AuthenticationRequired) as exc_info:
            anonymous.list_cases()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Authentication credentials not provided"

    def test_export_bytes(self, api):
        api.create_case({"anesthesiaType": "General anesthesia", "caseDate": "2024-01-15"})

        content = api.export("csv", "logbook")

        rows = list(csv.reader(io.StringIO(content.decode("utf-8"))))
        assert rows[0][:2] == ["Date", "Case #"]
        assert len(rows) == 2
