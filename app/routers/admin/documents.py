# app/routers/admin/documents.py

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.document import Document, DocumentType
from app.services import document as document_service

router = APIRouter()


@router.post("", response_model=Document, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    document_type: DocumentType = Form(...),
    client_id: int | None = Form(default=None),
    lta_id: int | None = Form(default=None),
    order_id: int | None = Form(default=None),
    price_offer_id: int | None = Form(default=None),
    db: Session = Depends(get_db)
):
    """[ADMIN] Registers a generated file (price offer PDF, invoice, contract)."""
    return await document_service.register_document(
        db,
        file,
        document_type,
        client_id=client_id,
        lta_id=lta_id,
        order_id=order_id,
        price_offer_id=price_offer_id,
    )
