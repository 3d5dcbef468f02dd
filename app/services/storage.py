# app/services/storage.py

import logging
import os
import uuid
from pathlib import Path

import aiofiles
from fastapi import HTTPException, UploadFile, status

from app.core.config import settings
from app.core.locales import error_detail

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def documents_dir() -> Path:
    path = Path(settings.DOCUMENTS_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


async def save_document_file(file: UploadFile) -> str:
    """
    Writes an uploaded file under DOCUMENTS_DIR with a unique name
    and returns the full path.
    """
    if not file or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("FILE_REQUIRED"))

    file_extension = Path(file.filename).suffix
    file_path = documents_dir() / f"{uuid.uuid4()}{file_extension}"
    try:
        async with aiofiles.open(file_path, 'wb') as out_file:
            while content := await file.read(CHUNK_SIZE):
                await out_file.write(content)
    except OSError:
        logger.error(f"Failed to save document file '{file.filename}'.", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error_detail("INTERNAL_ERROR"))

    logger.info(f"Saved document file '{file.filename}' to '{file_path}'.")
    return str(file_path)


async def remove_file(file_path: str):
    """Best-effort removal, used when a registration fails after the file was written."""
    try:
        if file_path and os.path.exists(file_path):
            os.remove(file_path)
            logger.info(f"Removed file: '{file_path}'.")
    except OSError:
        logger.error(f"Failed to remove file '{file_path}'.", exc_info=True)
