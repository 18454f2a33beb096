# pyright: reportMissingTypeStubs=false
"""
Case export API endpoint.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import CamelModel
from api.shared import parse_datetime_field
from auth.dependencies import UserContext, get_current_user
from core.database import get_db
from services.export_service import ExportService

logger = logging.getLogger(__name__)

router = APIRouter()


class ExportRequest(CamelModel):
    """
    Export options.

    ``format`` and ``type`` are checked by the export service so unknown
    values get a specific message.
    """
    format: str
    type: str
    date_range: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    include_notes: bool = False

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return parse_datetime_field(v)


@router.post("/export", summary="Export cases")
async def export_cases(
    request: ExportRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Response:
    """
    Download the user's cases as a summary, detailed, logbook or raw report.

    The file is named ``<type>-report-<YYYY-MM-DD>.<format>``.
    """
    try:
        result = ExportService().export_cases(
            db,
            current_user.user_id,
            export_format=request.format,
            report_type=request.type,
            date_range=request.date_range,
            start_date=request.start_date,
            end_date=request.end_date,
            include_notes=request.include_notes,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error generating export for user {current_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate export"
        )

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"'
        }
    )
