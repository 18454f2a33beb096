"""
Integration tests for the case endpoints.
"""

import re
from datetime import datetime, timedelta

from models import Patient, Procedure
from tests.utils import png_bytes

CASE_NUMBER_PATTERN = re.compile(r"^CASE-\d+-[a-z0-9]+$")


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value)


class TestCreateAndComplete:
    """Create/complete round trip for a single case."""

    def test_create_generates_case_number(self, client, auth_headers, sample_case_data):
        response = client.post("/api/cases", json=sample_case_data, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert CASE_NUMBER_PATTERN.match(body["caseNumber"])
        assert body["status"] == "in_progress"
        assert body["anesthesiologistId"] == "oidc|alice"
        assert body["caseDate"].startswith("2024-01-15")

    def test_complete_sets_status_and_end_time(self, client, auth_headers, sample_case_data):
        case_id = client.post("/api/cases", json=sample_case_data, headers=auth_headers).json()["id"]
        before = datetime.now() - timedelta(seconds=5)

        response = client.patch(f"/api/cases/{case_id}/complete", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        end_time = _parse(body["endTime"])
        assert end_time >= before
        assert end_time >= _parse(body["caseDate"])

    def test_complete_twice_overwrites_end_time(self, client, auth_headers, sample_case_data):
        case_id = client.post("/api/cases", json=sample_case_data, headers=auth_headers).json()["id"]

        first = client.patch(f"/api/cases/{case_id}/complete", headers=auth_headers).json()
        second = client.patch(f"/api/cases/{case_id}/complete", headers=auth_headers)

        assert second.status_code == 200
        assert second.json()["status"] == "completed"
        assert _parse(second.json()["endTime"]) >= _parse(first["endTime"])

    def test_explicit_case_number_conflict(self, client, auth_headers, sample_case_data):
        body = {**sample_case_data, "caseNumber": "CC-1001"}
        assert client.post("/api/cases", json=body, headers=auth_headers).status_code == 201

        response = client.post("/api/cases", json=body, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["message"] == "Case number already exists"


class TestCreateValidation:

    def test_missing_anesthesia_type(self, client, auth_headers):
        response = client.post("/api/cases", json={"caseDate": "2024-01-15"}, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation error"
        assert any(detail["loc"][-1] == "anesthesiaType" for detail in body["details"])

    def test_invalid_status(self, client, auth_headers, sample_case_data):
        response = client.post(
            "/api/cases", json={**sample_case_data, "status": "paused"}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_unauthenticated(self, client, sample_case_data):
        response = client.post("/api/cases", json=sample_case_data)
        assert response.status_code == 401


class TestPatientUpsertFromCases:
    """Cases carrying a patientId keep one patient record up to date."""

    def test_second_case_updates_existing_patient(self, client, auth_headers, db_session, sample_case_data):
        first = {**sample_case_data, "patientId": "PT-001", "patientName": "Jane Doe", "weight": "60"}
        second = {**sample_case_data, "patientId": "PT-001", "weight": "65"}

        assert client.post("/api/cases", json=first, headers=auth_headers).status_code == 201
        assert client.post("/api/cases", json=second, headers=auth_headers).status_code == 201

        patients = db_session.query(Patient).filter(Patient.patient_id == "PT-001").all()
        assert len(patients) == 1
        assert patients[0].weight == 65
        assert patients[0].first_name == "Jane"
        assert patients[0].last_name == "Doe"

        response = client.get("/api/patients/PT-001", headers=auth_headers)
        assert response.json()["weight"] == 65

    def test_multipart_create_with_photo(self, client, auth_headers):
        form = {
            "anesthesiaType": "Spinal anesthesia",
            "caseDate": "2024-02-01",
            "patientId": "PT-002",
            "patientName": "John Roe",
            "height": "180",
            "emergencyCase": "true",
            "techniques": '["ETT", "Arterial line"]',
        }
        files = {"casePhoto": ("monitor.png", png_bytes(), "image/png")}

        response = client.post("/api/cases", data=form, files=files, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["emergencyCase"] is True
        assert body["techniques"] == ["ETT", "Arterial line"]

        photos = client.get(f"/api/cases/{body['id']}/photos", headers=auth_headers).json()
        assert len(photos) == 1
        assert photos[0]["originalName"] == "monitor.png"
        assert photos[0]["url"].startswith("/api/uploads/case-")

    def test_bad_photo_does_not_fail_case(self, client, auth_headers):
        form = {"anesthesiaType": "General anesthesia", "caseDate": "2024-02-01"}
        files = {"casePhoto": ("notes.txt", b"plain text", "text/plain")}

        response = client.post("/api/cases", data=form, files=files, headers=auth_headers)

        assert response.status_code == 201
        photos = client.get(f"/api/cases/{response.json()['id']}/photos", headers=auth_headers).json()
        assert photos == []


class TestProcedureEmbedding:

    def test_catalog_procedure_embedded(self, client, auth_headers, db_session, sample_case_data):
        procedure = Procedure(name="Cholecystectomy", category="General Surgery")
        db_session.add(procedure)
        db_session.commit()

        created = client.post(
            "/api/cases", json={**sample_case_data, "procedureId": procedure.id}, headers=auth_headers
        ).json()

        fetched = client.get(f"/api/cases/{created['id']}", headers=auth_headers).json()
        listed = client.get("/api/cases", headers=auth_headers).json()

        expected = {"id": procedure.id, "name": "Cholecystectomy", "category": "General Surgery"}
        assert fetched["procedure"] == expected
        assert listed[0]["procedure"] == expected

    def test_custom_procedure_preserved(self, client, auth_headers, sample_case_data):
        created = client.post(
            "/api/cases",
            json={**sample_case_data, "customProcedureName": "Awake fiberoptic intubation"},
            headers=auth_headers,
        ).json()

        fetched = client.get(f"/api/cases/{created['id']}", headers=auth_headers).json()

        assert fetched["procedure"] is None
        assert fetched["customProcedureName"] == "Awake fiberoptic intubation"

    def test_unknown_procedure_rejected(self, client, auth_headers, sample_case_data):
        response = client.post(
            "/api/cases", json={**sample_case_data, "procedureId": 9999}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["msg"] == "Procedure 9999 does not exist"
        assert client.get("/api/cases", headers=auth_headers).json() == []

    def test_unknown_procedure_rejected_on_update(self, client, auth_headers, sample_case_data):
        case_id = client.post("/api/cases", json=sample_case_data, headers=auth_headers).json()["id"]

        response = client.patch(f"/api/cases/{case_id}", json={"procedureId": 9999}, headers=auth_headers)

        assert response.status_code == 400
        assert client.get(f"/api/cases/{case_id}", headers=auth_headers).json()["procedureId"] is None


class TestListAndSearch:

    def test_list_newest_first_with_pagination(self, client, auth_headers):
        for day in ("2024-01-01", "2024-03-01", "2024-02-01"):
            client.post(
                "/api/cases",
                json={"anesthesiaType": "General anesthesia", "caseDate": day},
                headers=auth_headers,
            )

        listed = client.get("/api/cases", headers=auth_headers).json()
        assert [case["caseDate"][:10] for case in listed] == ["2024-03-01", "2024-02-01", "2024-01-01"]

        page = client.get("/api/cases", params={"limit": 1, "offset": 1}, headers=auth_headers).json()
        assert [case["caseDate"][:10] for case in page] == ["2024-02-01"]

    def test_search_and_date_filter(self, client, auth_headers):
        client.post(
            "/api/cases",
            json={"anesthesiaType": "General anesthesia", "caseDate": "2024-01-10", "surgeonName": "Dr. Grey"},
            headers=auth_headers,
        )
        client.post(
            "/api/cases",
            json={"anesthesiaType": "General anesthesia", "caseDate": "2024-01-31", "patientName": "Max Power"},
            headers=auth_headers,
        )

        found = client.get("/api/cases", params={"search": "grey"}, headers=auth_headers).json()
        assert [case["surgeonName"] for case in found] == ["Dr. Grey"]

        ranged = client.get(
            "/api/cases", params={"startDate": "2024-01-15", "endDate": "2024-01-31"}, headers=auth_headers
        ).json()
        assert [case["patientName"] for case in ranged] == ["Max Power"]

    def test_search_honors_limit_and_offset(self, client, auth_headers):
        for day in ("2024-01-01", "2024-03-01", "2024-02-01"):
            client.post(
                "/api/cases",
                json={"anesthesiaType": "General anesthesia", "caseDate": day, "surgeonName": "Dr. Grey"},
                headers=auth_headers,
            )

        page = client.get(
            "/api/cases", params={"search": "grey", "limit": 1, "offset": 1}, headers=auth_headers
        ).json()

        assert [case["caseDate"][:10] for case in page] == ["2024-02-01"]


class TestUpdateAndDelete:

    def test_partial_update(self, client, auth_headers, sample_case_data):
        created = client.post(
            "/api/cases", json={**sample_case_data, "notes": "original"}, headers=auth_headers
        ).json()

        response = client.patch(
            f"/api/cases/{created['id']}", json={"asaScore": "ASA III"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["asaScore"] == "ASA III"
        assert response.json()["notes"] == "original"

    def test_null_on_required_fields_is_ignored(self, client, auth_headers, sample_case_data):
        created = client.post(
            "/api/cases", json={**sample_case_data, "emergencyCase": True, "notes": "keep?"}, headers=auth_headers
        ).json()

        response = client.patch(
            f"/api/cases/{created['id']}",
            json={"emergencyCase": None, "status": None, "anesthesiaType": None, "notes": None},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["emergencyCase"] is True
        assert body["status"] == "in_progress"
        assert body["anesthesiaType"] == "General anesthesia"
        assert body["notes"] is None

    def test_delete(self, client, auth_headers, sample_case_data):
        case_id = client.post("/api/cases", json=sample_case_data, headers=auth_headers).json()["id"]

        response = client.delete(f"/api/cases/{case_id}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/api/cases/{case_id}", headers=auth_headers).status_code == 404

    def test_missing_case(self, client, auth_headers):
        response = client.get("/api/cases/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Case not found"


class TestStatsAndAnalytics:

    def test_stats(self, client, auth_headers):
        client.post(
            "/api/cases",
            json={
                "anesthesiaType": "General anesthesia",
                "caseDate": "2024-01-15",
                "startTime": "2024-01-15T08:00:00",
                "endTime": "2024-01-15T09:30:00",
            },
            headers=auth_headers,
        )
        client.post(
            "/api/cases",
            json={"anesthesiaType": "Regional blocks", "caseDate": datetime.now().strftime("%Y-%m-%d")},
            headers=auth_headers,
        )

        stats = client.get("/api/cases/stats", headers=auth_headers).json()

        assert stats["totalCases"] == 2
        assert stats["casesThisMonth"] == 1
        assert stats["avgDuration"] == 90.0
        assert {row["anesthesiaType"] for row in stats["casesByType"]} == {"General anesthesia", "Regional blocks"}

    def test_analytics(self, client, auth_headers, sample_case_data):
        client.post("/api/cases", json=sample_case_data, headers=auth_headers)

        analytics = client.get("/api/cases/analytics", headers=auth_headers).json()

        assert analytics["totalCases"] == 1
        assert analytics["inProgressCases"] == 1
        assert analytics["casesByMonth"] == [{"label": "Jan 2024", "count": 1}]
        assert len(analytics["casesByDay"]) == 7
        assert analytics["casesByAsa"] == [{"label": "Not Specified", "count": 1}]
