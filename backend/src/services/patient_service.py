"""
Patient service for shared patient business logic.

This module contains all patient-related business logic shared between the
patients API and case creation (which upserts patients by their external
``patient_id``).
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import PATIENT_LIST_LIMIT, SEARCH_RESULT_LIMIT
from models import Patient

logger = logging.getLogger(__name__)

PATIENT_FIELDS = (
    "patient_id",
    "first_name",
    "last_name",
    "age",
    "gender",
    "weight",
    "height",
    "allergies",
    "medical_history",
)
REQUIRED_PATIENT_FIELDS = ("patient_id", "first_name")


def compute_bmi(weight: Optional[float], height: Optional[float]) -> Optional[float]:
    """
    Body-mass index from weight (kg) and height (cm), rounded to one decimal.

    Returns None unless both values are positive.
    """
    if not weight or not height or weight <= 0 or height <= 0:
        return None
    meters = height / 100.0
    return round(weight / (meters * meters), 1)


def split_patient_name(patient_name: str) -> tuple[str, str]:
    """Split 'Jane Mary Doe' into ('Jane', 'Mary Doe')."""
    parts = patient_name.split()
    if not parts:
        return patient_name, ""
    return parts[0], " ".join(parts[1:])


class PatientService:
    """
    Service class for patient operations.

    List and search methods always filter by the owning user; lookups by
    ``patient_id`` are global since that identifier is unique system-wide.
    """

    @staticmethod
    def list_patients(db: Session, user_id: str, limit: int = PATIENT_LIST_LIMIT) -> List[Patient]:
        """List the user's patients, newest first."""
        return (
            db.query(Patient)
            .filter(Patient.created_by == user_id)
            .order_by(Patient.created_at.desc(), Patient.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def search_patients(
        db: Session,
        user_id: str,
        query: str,
        limit: int = SEARCH_RESULT_LIMIT
    ) -> List[Patient]:
        """
        Case-insensitive substring search over first name, last name and patient id.
        """
        pattern = f"%{query.strip().lower()}%"
        return (
            db.query(Patient)
            .filter(
                Patient.created_by == user_id,
                or_(
                    func.lower(Patient.first_name).like(pattern),
                    func.lower(Patient.last_name).like(pattern),
                    func.lower(Patient.patient_id).like(pattern),
                ),
            )
            .order_by(Patient.created_at.desc(), Patient.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_patient_by_patient_id(db: Session, patient_id: str) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.patient_id == patient_id).first()

    @staticmethod
    def get_patient(db: Session, id: int) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.id == id).first()

    @staticmethod
    def get_owned_patient(db: Session, identifier: str, user_id: str) -> Patient:
        """
        Resolve a patient by external patient id, falling back to the numeric id.

        Raises:
            HTTPException: 404 if not found or owned by another user
        """
        patient = PatientService.get_patient_by_patient_id(db, identifier)
        if patient is None and identifier.isdigit():
            patient = PatientService.get_patient(db, int(identifier))

        if patient is None or patient.created_by != user_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
        return patient

    @staticmethod
    def create_patient(db: Session, user_id: str, data: Dict[str, Any]) -> Patient:
        """
        Create a patient owned by ``user_id``.

        Raises:
            HTTPException: 409 if ``patient_id`` is already taken
        """
        values = {k: v for k, v in data.items() if k in PATIENT_FIELDS}
        if PatientService.get_patient_by_patient_id(db, values["patient_id"]):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A patient with this patient ID already exists"
            )

        patient = Patient(created_by=user_id, **values)
        if patient.last_name is None:
            patient.last_name = ""
        patient.bmi = compute_bmi(patient.weight, patient.height)
        db.add(patient)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A patient with this patient ID already exists"
            )
        db.refresh(patient)
        logger.info(f"Created patient {patient.id} ({patient.patient_id}) for user {user_id}")
        return patient

    @staticmethod
    def apply_updates(patient: Patient, data: Dict[str, Any]) -> None:
        """Merge field values into ``patient`` and recompute BMI."""
        for field, value in data.items():
            if field not in PATIENT_FIELDS:
                continue
            if value is None and field in REQUIRED_PATIENT_FIELDS:
                continue
            setattr(patient, field, value)
        if patient.last_name is None:
            patient.last_name = ""
        patient.bmi = compute_bmi(patient.weight, patient.height)

    @staticmethod
    def update_patient(db: Session, patient: Patient, data: Dict[str, Any]) -> Patient:
        new_patient_id = data.get("patient_id")
        if new_patient_id and new_patient_id != patient.patient_id:
            if PatientService.get_patient_by_patient_id(db, new_patient_id):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="A patient with this patient ID already exists"
                )
        PatientService.apply_updates(patient, data)
        db.commit()
        db.refresh(patient)
        logger.info(f"Updated patient {patient.id}")
        return patient

    @staticmethod
    def delete_patient(db: Session, patient: Patient) -> None:
        db.delete(patient)
        db.commit()
        logger.info(f"Deleted patient {patient.id}")

    @staticmethod
    def upsert_patient_from_case(
        db: Session,
        user_id: str,
        patient_id: str,
        patient_name: Optional[str] = None,
        weight: Optional[float] = None,
        height: Optional[float] = None,
        age: Optional[int] = None,
    ) -> Optional[Patient]:
        """
        Create or update the patient referenced by a case.

        The patient row is keyed by ``patient_id``. Name and demographics are
        merged only when supplied, so a later case without weight keeps the
        earlier value. A new patient needs a name; without one nothing is
        created and None is returned. Changes are flushed, not committed; the
        caller owns the transaction boundary.
        """
        data: Dict[str, Any] = {"patient_id": patient_id}
        if patient_name and patient_name.strip():
            data["first_name"], data["last_name"] = split_patient_name(patient_name.strip())
        if weight:
            data["weight"] = weight
        if height:
            data["height"] = height
        if age:
            data["age"] = age

        existing = PatientService.get_patient_by_patient_id(db, patient_id)
        if existing:
            logger.info(f"Updating existing patient {existing.id} from case data")
            PatientService.apply_updates(existing, data)
            db.flush()
            return existing

        if "first_name" not in data:
            logger.info(f"Skipping patient creation for {patient_id}: no patient name on case")
            return None

        patient = Patient(created_by=user_id)
        PatientService.apply_updates(patient, data)
        db.add(patient)
        db.flush()
        logger.info(f"Created patient {patient.id} ({patient_id}) from case data")
        return patient
