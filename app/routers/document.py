# app/routers/document.py

from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.limiter import limiter
from app.dependencies import get_admin_user, get_current_user, get_db
from app.models.client import Client
from app.schemas.document import Document, DocumentAccessLog, DocumentToken, DocumentType
from app.services import document as document_service

router = APIRouter(prefix="/documents")


@router.get("", response_model=List[Document])
def get_documents(
    document_type: DocumentType | None = Query(default=None),
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return document_service.list_documents(db, current_user, document_type=document_type)


@router.post("/{document_id}/token", response_model=DocumentToken)
@limiter.limit(settings.DOCUMENT_TOKEN_RATE_LIMIT)
def create_download_token(
    request: Request,
    document_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Exchanges a document id for a short-lived download link."""
    return document_service.issue_download_token(db, document_id, current_user)


@router.get("/{document_id}/download", response_class=FileResponse)
def download_document(
    request: Request,
    document_id: int,
    token: str = Query(...),
    db: Session = Depends(get_db)
):
    """No bearer header: the signed token is the credential."""
    document = document_service.prepare_download(
        db,
        document_id,
        token,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return FileResponse(document.file_path, filename=document.file_name)


@router.get("/{document_id}/logs", response_model=List[DocumentAccessLog])
def get_document_logs(
    document_id: int,
    admin: Client = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return document_service.get_access_logs(db, document_id)
