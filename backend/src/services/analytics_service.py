"""
Analytics service for the per-user analytics page and system-wide counters.

Aggregations run in Python over the user's cases: the volume per user is small
and the breakdowns (calendar month label, weekday) are easier to express
without dialect-specific date functions.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.constants import TOP_PROCEDURES_LIMIT
from models import Case, Patient, Procedure, Surgeon
from services.case_service import average_duration_minutes
from utils.datetime_utils import day_range

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
NOT_SPECIFIED = "Not Specified"


def _label_counts(counter: Counter) -> List[Dict[str, Any]]:
    return [
        {"label": label, "count": count}
        for label, count in sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    ]


def _procedure_label(case: Case) -> Optional[str]:
    if case.procedure is not None:
        return case.procedure.name
    if case.custom_procedure_name and case.custom_procedure_name.strip():
        return case.custom_procedure_name.strip()
    return None


class AnalyticsService:

    @staticmethod
    def get_case_analytics(
        db: Session,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Compute analytics over the user's cases, optionally limited to a
        case-date range.

        Args:
            db: Database session
            user_id: Owning anesthesiologist
            start: Inclusive lower bound on case_date
            end: Inclusive upper bound (a date-only value covers the whole day)

        Returns:
            Dict with status counters, avg_duration (minutes), and label/count
            breakdowns by month, anesthesia type, weekday, ASA score and
            procedure (top entries only)
        """
        query = db.query(Case).filter(Case.anesthesiologist_id == user_id)
        if start is not None:
            query = query.filter(Case.case_date >= start)
        if end is not None:
            _, upper = day_range(start or end, end)
            query = query.filter(Case.case_date < upper)
        cases = query.order_by(Case.case_date).all()

        by_month: Dict[str, int] = {}
        for case in cases:
            # Cases are date-ordered, so insertion order is chronological
            label = case.case_date.strftime("%b %Y")
            by_month[label] = by_month.get(label, 0) + 1

        by_day = Counter(WEEKDAYS[case.case_date.weekday()] for case in cases)
        by_type = Counter(case.anesthesia_type for case in cases)
        by_asa = Counter(case.asa_score or NOT_SPECIFIED for case in cases)
        procedures = Counter(
            label for label in (_procedure_label(case) for case in cases) if label
        )

        return {
            "total_cases": len(cases),
            "completed_cases": sum(1 for case in cases if case.status == "completed"),
            "in_progress_cases": sum(1 for case in cases if case.status == "in_progress"),
            "emergency_cases": sum(1 for case in cases if case.emergency_case),
            "avg_duration": average_duration_minutes([(case.start_time, case.end_time) for case in cases]),
            "cases_by_month": [{"label": label, "count": count} for label, count in by_month.items()],
            "cases_by_type": _label_counts(by_type),
            "cases_by_day": [{"label": day, "count": by_day.get(day, 0)} for day in WEEKDAYS],
            "cases_by_asa": _label_counts(by_asa),
            "procedure_frequency": _label_counts(procedures)[:TOP_PROCEDURES_LIMIT],
        }

    @staticmethod
    def get_system_stats(db: Session) -> Dict[str, int]:
        """System-wide row counts for the admin dashboard."""
        return {
            "total_cases": db.query(func.count(Case.id)).scalar() or 0,
            "total_patients": db.query(func.count(Patient.id)).scalar() or 0,
            "total_surgeons": db.query(func.count(Surgeon.id)).scalar() or 0,
            "total_procedures": db.query(func.count(Procedure.id)).scalar() or 0,
        }
