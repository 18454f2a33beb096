"""
Export service for case reports.

Builds summary, detailed, logbook and raw reports over a user's cases and
renders them as CSV, JSON or PDF. PDF output is rendered from the Jinja2
templates in ``backend/templates/reports`` and converted with WeasyPrint.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi import HTTPException, status
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.orm import Session

from core.constants import EXPORT_FORMATS, EXPORT_MAX_CASES, EXPORT_TYPES, LOGBOOK_PROCEDURE_MAX_CHARS
from models import Case, Patient
from services.case_service import CaseService, serialize_case
from utils.datetime_utils import format_date, local_now

logger = logging.getLogger(__name__)

SUMMARY_HEADERS = ["Case Number", "Date", "Patient", "Procedure", "Anesthesia Type", "Duration", "ASA Score"]
DETAILED_HEADERS = [
    "Case Number", "Date", "Patient Name", "Patient ID", "Age", "Weight", "Height",
    "Procedure", "Surgeon", "Anesthesia Type", "Regional Block", "ASA Score",
    "Duration", "Diagnosis", "Complications", "Induction Meds", "Maintenance Meds", "Post-Op Meds",
]
LOGBOOK_HEADERS = [
    "Date", "Case #", "Patient", "Age", "Procedure", "Anesthesia Type", "ASA", "Duration", "Complications",
]

MEDIA_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
    "pdf": "application/pdf",
}

REPORT_TITLES = {
    "summary": "Case Summary Report",
    "detailed": "Detailed Case Report",
    "logbook": "Anesthesia Logbook",
    "raw": "Raw Case Data",
}


@dataclass
class ExportResult:
    content: bytes
    media_type: str
    filename: str


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def procedure_label(case: Case) -> str:
    if case.custom_procedure_name:
        return case.custom_procedure_name
    if case.procedure is not None:
        return case.procedure.name
    return ""


def duration_label(case: Case) -> str:
    """Clinician-entered duration, or the recorded start/end span in minutes."""
    if case.case_duration:
        return case.case_duration
    minutes = case.duration_minutes
    if minutes is None:
        return ""
    return f"{int(round(minutes))} min"


def to_csv(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    """Render rows as CSV with every field quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_text(value) for value in row])
    return output.getvalue()


class ExportService:
    """
    Service for generating case exports.

    Uses the same Jinja2 templates for the PDF of every report type; the
    template picks the layout from the report type.
    """

    def __init__(self):
        """Initialize export service with template loader."""
        # backend/templates
        template_dir = Path(__file__).parent.parent.parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"])
        )
        self.env.filters["cell"] = _text

    # Case selection

    @staticmethod
    def select_cases(
        db: Session,
        user_id: str,
        date_range: Optional[str],
        start_date=None,
        end_date=None
    ) -> List[Case]:
        """A custom range with both bounds filters by case date; anything else exports every case."""
        if date_range == "custom" and start_date and end_date:
            return CaseService.list_cases_by_date_range(
                db, user_id, start_date, end_date, limit=EXPORT_MAX_CASES
            )
        return CaseService.list_cases(db, user_id, limit=EXPORT_MAX_CASES)

    @staticmethod
    def _patients_by_id(db: Session, cases: Sequence[Case]) -> Dict[str, Patient]:
        patient_ids = {case.patient_id for case in cases if case.patient_id}
        if not patient_ids:
            return {}
        patients = db.query(Patient).filter(Patient.patient_id.in_(patient_ids)).all()
        return {patient.patient_id: patient for patient in patients}

    # Row builders

    @staticmethod
    def summary_rows(cases: Sequence[Case], include_notes: bool) -> Tuple[List[str], List[List[Any]]]:
        headers = SUMMARY_HEADERS + (["Notes"] if include_notes else [])
        rows = []
        for case in cases:
            row = [
                case.case_number,
                format_date(case.case_date),
                case.patient_name,
                procedure_label(case),
                case.anesthesia_type,
                duration_label(case),
                case.asa_score,
            ]
            if include_notes:
                row.append(case.notes)
            rows.append(row)
        return headers, rows

    @staticmethod
    def detailed_rows(
        cases: Sequence[Case],
        patients: Dict[str, Patient],
        include_notes: bool
    ) -> Tuple[List[str], List[List[Any]]]:
        headers = DETAILED_HEADERS + (["Notes"] if include_notes else [])
        rows = []
        for case in cases:
            patient = patients.get(case.patient_id) if case.patient_id else None
            row = [
                case.case_number,
                format_date(case.case_date),
                case.patient_name,
                case.patient_id,
                patient.age if patient else None,
                patient.weight if patient else None,
                patient.height if patient else None,
                procedure_label(case),
                case.surgeon_name,
                case.anesthesia_type,
                case.regional_block_type or case.custom_regional_block,
                case.asa_score,
                duration_label(case),
                case.diagnosis,
                case.complications,
                case.induction_medications,
                case.maintenance_medications,
                case.post_op_medications,
            ]
            if include_notes:
                row.append(case.notes)
            rows.append(row)
        return headers, rows

    @staticmethod
    def logbook_rows(cases: Sequence[Case], patients: Dict[str, Patient]) -> Tuple[List[str], List[List[Any]]]:
        rows = []
        for index, case in enumerate(cases):
            patient = patients.get(case.patient_id) if case.patient_id else None
            rows.append([
                format_date(case.case_date),
                index + 1,
                case.patient_name,
                patient.age if patient else None,
                procedure_label(case)[:LOGBOOK_PROCEDURE_MAX_CHARS],
                case.anesthesia_type,
                case.asa_score,
                duration_label(case),
                "Yes" if case.complications else "No",
            ])
        return list(LOGBOOK_HEADERS), rows

    @staticmethod
    def raw_rows(serialized: Sequence[Dict[str, Any]]) -> Tuple[List[str], List[List[Any]]]:
        """Union of keys across the serialized cases, in first-seen order."""
        headers: List[str] = []
        for item in serialized:
            for key in item:
                if key not in headers:
                    headers.append(key)
        rows = [[item.get(key) for key in headers] for item in serialized]
        return headers, rows

    # Rendering

    def render_html(
        self,
        report_type: str,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        cases: Sequence[Case]
    ) -> str:
        dates = [case.case_date for case in cases if case.case_date]
        template = self.env.get_template(f"reports/{report_type if report_type != 'raw' else 'summary'}.html")
        return template.render(
            title=REPORT_TITLES[report_type],
            generated_on=format_date(local_now()),
            total_cases=len(cases),
            date_from=format_date(min(dates)) if dates else None,
            date_to=format_date(max(dates)) if dates else None,
            headers=headers,
            rows=rows,
        )

    def render_pdf(self, html_content: str) -> bytes:
        """
        Convert rendered report HTML to PDF.

        Raises:
            Exception: If PDF generation fails
        """
        from weasyprint import HTML  # type: ignore

        base_url = str(Path(__file__).parent.parent.parent)
        return HTML(string=html_content, base_url=base_url).write_pdf()

    def export_cases(
        self,
        db: Session,
        user_id: str,
        export_format: str,
        report_type: str,
        date_range: Optional[str] = None,
        start_date=None,
        end_date=None,
        include_notes: bool = False
    ) -> ExportResult:
        """
        Build an export file for the user's cases.

        Args:
            db: Database session
            user_id: Owner of the exported cases
            export_format: 'csv', 'json' or 'pdf'
            report_type: 'summary', 'detailed', 'logbook' or 'raw'
            date_range: 'custom' to honor start_date/end_date
            start_date: Inclusive start of a custom range
            end_date: Inclusive end day of a custom range
            include_notes: Append the notes column (summary, detailed)

        Returns:
            ExportResult with content, media type and download filename

        Raises:
            HTTPException: 400 for an unknown report type or format
        """
        if report_type not in EXPORT_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid export type")
        if export_format not in EXPORT_FORMATS:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid export format")

        cases = self.select_cases(db, user_id, date_range, start_date, end_date)
        patients = self._patients_by_id(db, cases)
        serialized: List[Dict[str, Any]] = []

        if report_type == "summary":
            headers, rows = self.summary_rows(cases, include_notes)
        elif report_type == "detailed":
            headers, rows = self.detailed_rows(cases, patients, include_notes)
        elif report_type == "logbook":
            headers, rows = self.logbook_rows(cases, patients)
        else:
            serialized = [serialize_case(case) for case in cases]
            headers, rows = self.raw_rows(serialized)

        if export_format == "csv":
            content = to_csv(headers, rows).encode("utf-8")
        elif export_format == "json":
            if report_type == "raw":
                payload: Any = serialized
            else:
                payload = [dict(zip(headers, row)) for row in rows]
            content = json.dumps(payload, ensure_ascii=False, default=str).encode("utf-8")
        else:
            content = self.render_pdf(self.render_html(report_type, headers, rows, cases))

        filename = f"{report_type}-report-{format_date(local_now())}.{export_format}"
        logger.info(f"Exported {len(cases)} cases for user {user_id} as {filename}")
        return ExportResult(content=content, media_type=MEDIA_TYPES[export_format], filename=filename)
