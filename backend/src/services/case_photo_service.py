"""
Case photo service.

Photos are stored on local disk through ``utils.file_storage`` and recorded in
``case_photos``. Only image MIME types are accepted and every upload is
decoded with Pillow before the record is written.
"""

import logging
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from api.responses import CasePhotoResponse
from core.constants import ALLOWED_IMAGE_MIME_TYPES, CASE_PHOTO_PREFIX
from models import Case, CasePhoto
from utils.file_storage import delete_file, file_url, save_upload_file, verify_image

logger = logging.getLogger(__name__)


def to_photo_response(photo: CasePhoto) -> CasePhotoResponse:
    response = CasePhotoResponse.model_validate(photo)
    response.url = file_url(photo.file_name)
    return response


class CasePhotoService:

    @staticmethod
    async def upload_photo(
        db: Session,
        case_id: int,
        user_id: str,
        upload_file: UploadFile,
        description: Optional[str] = None
    ) -> CasePhoto:
        """
        Store an image and attach it to a case.

        Args:
            db: Database session
            case_id: Target case; must exist
            user_id: Uploading user
            upload_file: Multipart image
            description: Optional caption

        Returns:
            The created CasePhoto

        Raises:
            HTTPException: 404 if the case is missing, 400 for a non-image
                upload, 413 if the file is over the size limit
        """
        if not db.query(Case.id).filter(Case.id == case_id).first():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Case not found")

        mime_type = (upload_file.content_type or "").lower()
        if mime_type not in ALLOWED_IMAGE_MIME_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only image files are allowed"
            )

        file_name, size = await save_upload_file(upload_file, CASE_PHOTO_PREFIX)
        try:
            verify_image(file_name)
        except HTTPException:
            delete_file(file_name)
            raise

        photo = CasePhoto(
            case_id=case_id,
            file_name=file_name,
            original_name=upload_file.filename or file_name,
            mime_type=mime_type,
            size=size,
            description=description,
            uploaded_by=user_id,
        )
        db.add(photo)
        db.commit()
        db.refresh(photo)
        logger.info(f"Uploaded photo {photo.id} for case {case_id}")
        return photo

    @staticmethod
    def list_photos(db: Session, case_id: int) -> List[CasePhoto]:
        """Photos of a case, oldest first."""
        return (
            db.query(CasePhoto)
            .filter(CasePhoto.case_id == case_id)
            .order_by(CasePhoto.created_at.asc(), CasePhoto.id.asc())
            .all()
        )

    @staticmethod
    def get_photo(db: Session, case_id: int, photo_id: int) -> CasePhoto:
        photo = db.query(CasePhoto).filter(
            CasePhoto.id == photo_id,
            CasePhoto.case_id == case_id
        ).first()
        if not photo:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo not found")
        return photo

    @staticmethod
    def delete_photo(db: Session, photo: CasePhoto) -> None:
        """Delete the record, then the stored file."""
        file_name = photo.file_name
        db.delete(photo)
        db.commit()
        if not delete_file(file_name):
            logger.warning(f"Photo file {file_name} was already missing")
        logger.info(f"Deleted photo {photo.id}")
