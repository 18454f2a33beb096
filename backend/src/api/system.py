# pyright: reportMissingTypeStubs=false
"""
System API endpoints.

One-time setup gated by the setup secret, the signed-in contact form, and
serving of uploaded files.
"""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from api.responses import CamelModel, SetupResponse, SuccessResponse
from auth.dependencies import UserContext, get_current_user
from core.config import SETUP_SECRET
from core.database import get_db
from services.procedure_service import ProcedureService
from services.user_service import UserService
from utils.file_storage import resolve_upload_path

logger = logging.getLogger(__name__)

router = APIRouter()


class SetupRequest(CamelModel):
    email: Optional[str] = None
    secret: Optional[str] = None


class ContactRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


@router.post("/setup", summary="Initial setup", response_model=SetupResponse)
async def setup(
    request: SetupRequest,
    db: Session = Depends(get_db)
) -> SetupResponse:
    """
    Seed the procedure catalog and optionally promote a user to admin.

    Requires the configured setup secret. Safe to call repeatedly: seeding
    skips procedures that already exist.
    """
    if not request.secret or not secrets.compare_digest(request.secret, SETUP_SECRET):
        logger.warning("Setup attempted with invalid secret")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid setup secret")

    admin_set = False
    if request.email:
        admin_set = UserService.promote_to_admin(db, request.email) is not None

    procedures_added = ProcedureService.seed_default_procedures(db)
    logger.info(f"✅ Setup completed: {procedures_added} procedures added, admin set: {admin_set}")

    return SetupResponse(
        message="Setup completed successfully",
        procedures_added=procedures_added,
        admin_set=admin_set,
    )


@router.post("/contact", summary="Contact form", response_model=SuccessResponse)
async def contact(
    request: ContactRequest,
    current_user: UserContext = Depends(get_current_user)
) -> SuccessResponse:
    """Accept a contact message. Messages are logged, not delivered."""
    fields = (request.name, request.email, request.subject, request.message)
    if not all(field and field.strip() for field in fields):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="All fields are required")

    logger.info(
        f"Contact form submission from user {current_user.user_id} "
        f"({request.name} <{request.email}>): {request.subject}"
    )
    return SuccessResponse(
        success=True,
        message="Your message has been sent successfully. We'll get back to you soon!",
    )


@router.get("/uploads/{filename}", summary="Serve uploaded file")
async def get_uploaded_file(filename: str) -> FileResponse:
    path = resolve_upload_path(filename)
    if path is None or not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(str(path))
