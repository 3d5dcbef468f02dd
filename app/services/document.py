# app/services/document.py

import logging
import os
from datetime import timedelta
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.locales import error_detail
from app.crud import document as crud_document
from app.models.client import Client
from app.models.document import Document
from app.schemas.document import DocumentToken, DocumentType
from app.services import storage as storage_service
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

DOWNLOAD_PURPOSE = "document_download"


def get_document_for(db: Session, document_id: int, actor: Client) -> Document:
    document = crud_document.get_document(db, document_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("DOCUMENT_NOT_FOUND"))
    if not actor.is_admin and document.client_id != actor.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_detail("DOCUMENT_ACCESS_DENIED"))
    return document


def list_documents(db: Session, actor: Client, document_type: Optional[str] = None) -> List[Document]:
    """Admins see every document, clients only their own."""
    client_id = None if actor.is_admin else actor.id
    return crud_document.get_documents(db, client_id=client_id, document_type=document_type)


async def register_document(
    db: Session,
    file: UploadFile,
    document_type: DocumentType,
    client_id: Optional[int] = None,
    lta_id: Optional[int] = None,
    order_id: Optional[int] = None,
    price_offer_id: Optional[int] = None,
) -> Document:
    file_path = await storage_service.save_document_file(file)
    try:
        document = crud_document.create_document(
            db,
            document_type=document_type,
            file_name=file.filename,
            file_path=file_path,
            client_id=client_id,
            lta_id=lta_id,
            order_id=order_id,
            price_offer_id=price_offer_id,
        )
    except Exception:
        db.rollback()
        await storage_service.remove_file(file_path)
        raise
    logger.info(f"Document {document.id} ({document_type}) registered.")
    return document


def issue_download_token(db: Session, document_id: int, actor: Client) -> DocumentToken:
    """Short-lived signed token bound to one document and one client."""
    document = get_document_for(db, document_id, actor)
    expires_at = utcnow() + timedelta(minutes=settings.DOCUMENT_TOKEN_EXPIRE_MINUTES)
    token = jwt.encode(
        {"doc": document.id, "sub": str(actor.id), "purpose": DOWNLOAD_PURPOSE, "exp": expires_at},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    crud_document.log_access(db, document.id, actor.id, action="view")
    return DocumentToken(
        token=token,
        expires_at=expires_at,
        download_url=f"/api/documents/{document.id}/download?token={token}",
    )


def verify_download_token(token: str, document_id: int) -> int:
    """Returns the client id the token was issued to. 410 when expired, 403 otherwise."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=error_detail("DOCUMENT_TOKEN_EXPIRED"))
    except JWTError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_detail("DOCUMENT_TOKEN_INVALID"))

    if payload.get("purpose") != DOWNLOAD_PURPOSE or payload.get("doc") != document_id or not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_detail("DOCUMENT_TOKEN_INVALID"))
    return int(payload["sub"])


def prepare_download(
    db: Session,
    document_id: int,
    token: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> Document:
    client_id = verify_download_token(token, document_id)
    document = crud_document.get_document(db, document_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("DOCUMENT_NOT_FOUND"))
    if not os.path.exists(document.file_path):
        logger.error(f"File for document {document.id} is missing at '{document.file_path}'.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("DOCUMENT_FILE_MISSING"))
    crud_document.log_access(
        db, document.id, client_id, action="download", ip_address=ip_address, user_agent=user_agent
    )
    return document


def get_access_logs(db: Session, document_id: int):
    if not crud_document.get_document(db, document_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("DOCUMENT_NOT_FOUND"))
    return crud_document.get_access_logs(db, document_id)
