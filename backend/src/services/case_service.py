"""
Case service for the core case-logging business logic.

Every list, search and stats method is scoped to one anesthesiologist; the
only unscoped readers are the admin methods (``list_all_cases`` and
``get_case``). Case creation is a small saga: the patient upsert runs on its
own savepoint and may fail without aborting the case write.
"""

import logging
import secrets
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.responses import CaseResponse
from core.constants import CASE_LIST_LIMIT, CASE_STATUSES, SEARCH_RESULT_LIMIT
from models import Case, Procedure
from services.patient_service import PatientService
from utils.datetime_utils import day_range, local_now, month_bounds

logger = logging.getLogger(__name__)

CASE_FIELDS = (
    "case_number",
    "patient_id",
    "patient_name",
    "surgeon_name",
    "procedure_id",
    "custom_procedure_name",
    "procedure_category",
    "supervisor_id",
    "anesthesia_type",
    "regional_block_type",
    "custom_regional_block",
    "asa_score",
    "emergency_case",
    "case_date",
    "start_time",
    "end_time",
    "induction_time",
    "incision_time",
    "emergence_time",
    "case_duration",
    "diagnosis",
    "complications",
    "medications",
    "induction_medications",
    "maintenance_medications",
    "post_op_medications",
    "techniques",
    "monitoring",
    "notes",
    "status",
)

# Columns that cannot be cleared; an explicit null on update leaves them unchanged
REQUIRED_FIELDS = ("case_number", "anesthesia_type", "emergency_case", "case_date", "status")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_case_number() -> str:
    """
    Generate a case number of the form ``CASE-<epoch ms>-<9 base36 chars>``.

    The random suffix keeps numbers unique when several cases are created in
    the same millisecond; the unique constraint on ``case_number`` backs it.
    """
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"CASE-{int(time.time() * 1000)}-{suffix}"


def average_duration_minutes(spans: Sequence[Tuple[Optional[datetime], Optional[datetime]]]) -> float:
    """
    Mean of (end - start) in minutes, rounded to one decimal.

    Pairs missing either side, or ending before they start, are ignored.
    Returns 0.0 when no pair qualifies.
    """
    durations = [
        (end - start).total_seconds() / 60.0
        for start, end in spans
        if start is not None and end is not None and end >= start
    ]
    if not durations:
        return 0.0
    return round(sum(durations) / len(durations), 1)


def serialize_case(case: Case) -> Dict[str, Any]:
    """Wire representation of a case (camelCase keys, ISO datetimes, embedded procedure)."""
    return CaseResponse.model_validate(case).model_dump(by_alias=True, mode="json")


class CaseService:
    """
    Service class for case operations.

    Contains the data access for the cases API, the dashboard stats and the
    admin case views.
    """

    @staticmethod
    def _owned(db: Session, user_id: str):
        return db.query(Case).filter(Case.anesthesiologist_id == user_id)

    @staticmethod
    def _check_procedure(db: Session, procedure_id: Optional[int]) -> None:
        if procedure_id is None:
            return
        if not db.query(Procedure.id).filter(Procedure.id == procedure_id).first():
            raise ValueError(f"Procedure {procedure_id} does not exist")

    @staticmethod
    def _case_number_taken(db: Session, case_number: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(Case.id).filter(Case.case_number == case_number)
        if exclude_id is not None:
            query = query.filter(Case.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def _commit_case(db: Session, case_number: str, case_id: Optional[int] = None) -> None:
        """Commit, reporting a case-number collision as 409 and re-raising anything else."""
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if CaseService._case_number_taken(db, case_number, case_id):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Case number already exists"
                )
            raise

    @staticmethod
    def list_cases(
        db: Session,
        user_id: str,
        limit: int = CASE_LIST_LIMIT,
        offset: int = 0
    ) -> List[Case]:
        """List the user's cases, most recent case date first."""
        return (
            CaseService._owned(db, user_id)
            .order_by(Case.case_date.desc(), Case.created_at.desc(), Case.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    @staticmethod
    def search_cases(
        db: Session,
        user_id: str,
        query: str,
        limit: int = SEARCH_RESULT_LIMIT,
        offset: int = 0
    ) -> List[Case]:
        """
        Case-insensitive substring search over case number, patient name,
        patient id and surgeon name.
        """
        pattern = f"%{query.strip().lower()}%"
        return (
            CaseService._owned(db, user_id)
            .filter(
                or_(
                    func.lower(Case.case_number).like(pattern),
                    func.lower(Case.patient_name).like(pattern),
                    func.lower(Case.patient_id).like(pattern),
                    func.lower(Case.surgeon_name).like(pattern),
                )
            )
            .order_by(Case.case_date.desc(), Case.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    @staticmethod
    def list_cases_by_date_range(
        db: Session,
        user_id: str,
        start: Optional[datetime],
        end: Optional[datetime],
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Case]:
        """
        List the user's cases whose case date falls within [start, end].

        Either bound may be omitted. A date-only ``end`` includes that whole day.
        """
        query = CaseService._owned(db, user_id)
        if start is not None:
            query = query.filter(Case.case_date >= start)
        if end is not None:
            _, upper = day_range(start or end, end)
            query = query.filter(Case.case_date < upper)
        query = query.order_by(Case.case_date.desc(), Case.created_at.desc(), Case.id.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_case(db: Session, case_id: int) -> Optional[Case]:
        return db.query(Case).filter(Case.id == case_id).first()

    @staticmethod
    def get_owned_case(db: Session, case_id: int, user_id: str) -> Case:
        """
        Fetch a case belonging to ``user_id``.

        Raises:
            HTTPException: 404 if the case does not exist or belongs to another user
        """
        case = CaseService._owned(db, user_id).filter(Case.id == case_id).first()
        if not case:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Case not found")
        return case

    @staticmethod
    def create_case(
        db: Session,
        user_id: str,
        data: Dict[str, Any],
        weight: Optional[float] = None,
        height: Optional[float] = None,
        age: Optional[int] = None,
    ) -> Case:
        """
        Create a case owned by ``user_id``.

        When ``patient_id`` is present the referenced patient is upserted
        first, inside a savepoint. A failure there is logged and rolled back to
        the savepoint; the case is still written.

        Args:
            db: Database session
            user_id: Owning anesthesiologist
            data: Case fields (snake_case)
            weight: Patient weight carried on the case form (kg)
            height: Patient height carried on the case form (cm)
            age: Patient age carried on the case form

        Returns:
            The created Case

        Raises:
            HTTPException: 409 if an explicit case number is already in use
            ValueError: if ``procedure_id`` is not in the catalog
        """
        CaseService._check_procedure(db, data.get("procedure_id"))

        patient_id = data.get("patient_id")
        if patient_id:
            try:
                with db.begin_nested():
                    PatientService.upsert_patient_from_case(
                        db,
                        user_id=user_id,
                        patient_id=patient_id,
                        patient_name=data.get("patient_name"),
                        weight=weight,
                        height=height,
                        age=age,
                    )
            except Exception as e:
                logger.exception(f"Error handling patient data for case (patient {patient_id}): {e}")

        values = {k: v for k, v in data.items() if k in CASE_FIELDS}
        case_number = (values.get("case_number") or "").strip()
        if case_number:
            if db.query(Case.id).filter(Case.case_number == case_number).first():
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Case number already exists"
                )
        else:
            case_number = generate_case_number()
        values["case_number"] = case_number
        if not values.get("status"):
            values.pop("status", None)

        case = Case(anesthesiologist_id=user_id, **values)
        db.add(case)
        CaseService._commit_case(db, case_number)
        db.refresh(case)
        logger.info(f"Created case {case.id} ({case.case_number}) for user {user_id}")
        return case

    @staticmethod
    def update_case(db: Session, case: Case, data: Dict[str, Any]) -> Case:
        """
        Apply a partial update. Only supplied fields are written.

        A null for a required column (see ``REQUIRED_FIELDS``) is ignored.
        """
        changes = {
            field: value
            for field, value in data.items()
            if field in CASE_FIELDS and not (value is None and field in REQUIRED_FIELDS)
        }
        new_number = changes.get("case_number")
        if new_number and new_number != case.case_number:
            if CaseService._case_number_taken(db, new_number, case.id):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Case number already exists"
                )
        if "status" in changes and changes["status"] not in CASE_STATUSES:
            raise ValueError(f"Invalid status: {changes['status']}")
        CaseService._check_procedure(db, changes.get("procedure_id"))

        for field, value in changes.items():
            setattr(case, field, value)
        CaseService._commit_case(db, case.case_number, case.id)
        db.refresh(case)
        logger.info(f"Updated case {case.id}: {sorted(changes)}")
        return case

    @staticmethod
    def complete_case(db: Session, case: Case) -> Case:
        """
        Mark a case completed and stamp its end time with the current time.

        Runs regardless of the current status; completing twice moves the end
        time to the latest call.
        """
        case.status = "completed"
        case.end_time = local_now()
        db.commit()
        db.refresh(case)
        logger.info(f"Completed case {case.id}")
        return case

    @staticmethod
    def delete_case(db: Session, case: Case) -> None:
        """Delete a case. Attached photos are left in place."""
        db.delete(case)
        db.commit()
        logger.info(f"Deleted case {case.id}")

    @staticmethod
    def get_case_stats(db: Session, user_id: str) -> Dict[str, Any]:
        """
        Dashboard aggregates for one user.

        Returns:
            Dict with total_cases, cases_this_month (server-local calendar
            month), cases_by_type and avg_duration (minutes)
        """
        total = db.query(func.count(Case.id)).filter(Case.anesthesiologist_id == user_id).scalar() or 0

        month_start, month_end = month_bounds()
        this_month = db.query(func.count(Case.id)).filter(
            Case.anesthesiologist_id == user_id,
            Case.case_date >= month_start,
            Case.case_date < month_end,
        ).scalar() or 0

        by_type = (
            db.query(Case.anesthesia_type, func.count(Case.id))
            .filter(Case.anesthesiologist_id == user_id)
            .group_by(Case.anesthesia_type)
            .order_by(func.count(Case.id).desc(), Case.anesthesia_type)
            .all()
        )

        spans = (
            db.query(Case.start_time, Case.end_time)
            .filter(
                Case.anesthesiologist_id == user_id,
                Case.start_time.isnot(None),
                Case.end_time.isnot(None),
            )
            .all()
        )

        return {
            "total_cases": total,
            "cases_this_month": this_month,
            "cases_by_type": [
                {"anesthesia_type": anesthesia_type, "count": count}
                for anesthesia_type, count in by_type
            ],
            "avg_duration": average_duration_minutes(spans),
        }

    @staticmethod
    def list_all_cases(
        db: Session,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Case]:
        """Admin view: every case across all users, newest first."""
        query = db.query(Case).order_by(Case.case_date.desc(), Case.created_at.desc(), Case.id.desc())
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all()
