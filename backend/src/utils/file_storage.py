"""
Local file storage for uploaded images.

Files are written to ``UPLOAD_DIR`` under generated names and served back by
``GET /api/uploads/{filename}``. Only bare filenames are stored in the
database; every path is resolved against the upload directory.
"""

import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from fastapi import HTTPException, UploadFile, status
from PIL import Image

from core.config import MAX_UPLOAD_SIZE_MB, UPLOAD_DIR

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB
MAX_UPLOAD_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024


def upload_root() -> Path:
    return Path(UPLOAD_DIR).resolve()


def ensure_upload_dir() -> Path:
    root = upload_root()
    root.mkdir(parents=True, exist_ok=True)
    return root


def generate_filename(prefix: str, original_name: Optional[str]) -> str:
    """Build ``<prefix>-<epoch ms>-<random><ext>`` keeping the original extension."""
    extension = os.path.splitext(original_name or "")[1].lower()
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{extension}"


def file_url(file_name: str) -> str:
    return f"/api/uploads/{file_name}"


def resolve_upload_path(file_name: str) -> Optional[Path]:
    """
    Resolve ``file_name`` inside the upload directory.

    Returns None for names that would escape the directory (``..``, absolute
    paths, nested separators).
    """
    if not file_name or file_name != os.path.basename(file_name):
        return None
    root = upload_root()
    path = (root / file_name).resolve()
    if path.parent != root:
        return None
    return path


async def save_upload_file(
    upload_file: UploadFile,
    prefix: str,
    max_bytes: int = MAX_UPLOAD_BYTES
) -> Tuple[str, int]:
    """
    Stream an upload to disk in chunks.

    Args:
        upload_file: Incoming multipart file
        prefix: Filename prefix ('case', 'profile')
        max_bytes: Size limit; larger uploads are removed and rejected

    Returns:
        (stored file name, size in bytes)

    Raises:
        HTTPException: 413 if the file exceeds ``max_bytes``
    """
    root = ensure_upload_dir()
    file_name = generate_filename(prefix, upload_file.filename)
    file_path = root / file_name

    await upload_file.seek(0)
    size = 0
    async with aiofiles.open(file_path, "wb") as out_file:
        while content := await upload_file.read(CHUNK_SIZE):
            size += len(content)
            if size > max_bytes:
                break
            await out_file.write(content)

    if size > max_bytes:
        delete_file(file_name)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large (max {MAX_UPLOAD_SIZE_MB}MB)"
        )

    logger.info(f"Saved upload {file_name} ({size} bytes)")
    return file_name, size


def verify_image(file_name: str) -> None:
    """
    Check that a stored file decodes as an image.

    Raises:
        HTTPException: 400 if Pillow cannot identify the file
    """
    path = resolve_upload_path(file_name)
    if path is None or not path.exists():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file not found")
    try:
        with Image.open(path) as image:
            image.verify()
    except (OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Rejected upload {file_name}: not a valid image ({e})")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid image file")


def delete_file(file_name: str) -> bool:
    """Remove a stored file. Returns False when it was already gone."""
    path = resolve_upload_path(file_name)
    if path is None or not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        # Log but don't fail the caller
        logger.warning(f"Failed to delete local file {path}: {e}")
        return False
    return True
