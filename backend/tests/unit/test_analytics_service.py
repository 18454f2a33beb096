"""
Unit tests for AnalyticsService.
"""

from datetime import datetime, timedelta

from models import Procedure
from services.analytics_service import AnalyticsService
from services.case_service import CaseService
from services.patient_service import PatientService
from services.surgeon_service import SurgeonService


def _create(db_session, user_id, **fields):
    data = {"anesthesia_type": "General anesthesia", "case_date": datetime(2024, 1, 15)}
    data.update(fields)
    return CaseService.create_case(db_session, user_id, data)


def _as_dict(rows):
    return {row["label"]: row["count"] for row in rows}


class TestCaseAnalytics:

    def test_breakdowns(self, db_session, user):
        procedure = Procedure(name="Appendectomy", category="General Surgery")
        db_session.add(procedure)
        db_session.commit()

        start = datetime(2024, 1, 15, 8, 0)
        # 2024-01-15 is a Monday, 2024-02-07 a Wednesday
        _create(db_session, user.id, procedure_id=procedure.id, asa_score="ASA I",
                start_time=start, end_time=start + timedelta(minutes=30))
        _create(db_session, user.id, procedure_id=procedure.id, emergency_case=True, status="in_progress",
                start_time=start, end_time=start + timedelta(minutes=90))
        _create(db_session, user.id, case_date=datetime(2024, 2, 7), custom_procedure_name="Awake fiberoptic",
                anesthesia_type="Regional blocks")

        analytics = AnalyticsService.get_case_analytics(db_session, user.id)

        assert analytics["total_cases"] == 3
        assert analytics["completed_cases"] == 2
        assert analytics["in_progress_cases"] == 1
        assert analytics["emergency_cases"] == 1
        assert analytics["avg_duration"] == 60.0
        assert analytics["cases_by_month"] == [
            {"label": "Jan 2024", "count": 2},
            {"label": "Feb 2024", "count": 1},
        ]
        assert _as_dict(analytics["cases_by_type"]) == {"General anesthesia": 2, "Regional blocks": 1}
        assert [row["label"] for row in analytics["cases_by_day"]][0] == "Monday"
        assert _as_dict(analytics["cases_by_day"])["Monday"] == 2
        assert _as_dict(analytics["cases_by_day"])["Wednesday"] == 1
        assert _as_dict(analytics["cases_by_day"])["Sunday"] == 0
        assert _as_dict(analytics["cases_by_asa"]) == {"ASA I": 1, "Not Specified": 2}
        assert analytics["procedure_frequency"][0] == {"label": "Appendectomy", "count": 2}

    def test_date_filter(self, db_session, user):
        _create(db_session, user.id, case_date=datetime(2024, 1, 10))
        _create(db_session, user.id, case_date=datetime(2024, 3, 10))

        analytics = AnalyticsService.get_case_analytics(
            db_session, user.id, datetime(2024, 3, 1), datetime(2024, 3, 31)
        )
        assert analytics["total_cases"] == 1

    def test_procedure_frequency_top_ten(self, db_session, user):
        for index in range(12):
            for _ in range(index + 1):
                _create(db_session, user.id, custom_procedure_name=f"Procedure {index:02d}")

        frequency = AnalyticsService.get_case_analytics(db_session, user.id)["procedure_frequency"]

        assert len(frequency) == 10
        assert frequency[0] == {"label": "Procedure 11", "count": 12}

    def test_empty(self, db_session, user):
        analytics = AnalyticsService.get_case_analytics(db_session, user.id)
        assert analytics["total_cases"] == 0
        assert analytics["avg_duration"] == 0.0
        assert len(analytics["cases_by_day"]) == 7


class TestSystemStats:

    def test_counts_across_users(self, db_session, user, other_user):
        _create(db_session, user.id)
        _create(db_session, other_user.id)
        PatientService.create_patient(db_session, user.id, {"patient_id": "PT-1", "first_name": "Jane"})
        SurgeonService.create_surgeon(db_session, other_user.id, {"first_name": "Greg", "last_name": "House"})

        assert AnalyticsService.get_system_stats(db_session) == {
            "total_cases": 2,
            "total_patients": 1,
            "total_surgeons": 1,
            "total_procedures": 0,
        }
