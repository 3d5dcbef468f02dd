# app/crud/document.py
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.document import Document, DocumentAccessLog


def get_document(db: Session, document_id: int) -> Document | None:
    return db.get(Document, document_id)


def get_documents(
    db: Session, client_id: Optional[int] = None, document_type: Optional[str] = None
) -> List[Document]:
    query = db.query(Document)
    if client_id is not None:
        query = query.filter(Document.client_id == client_id)
    if document_type:
        query = query.filter(Document.document_type == document_type)
    return query.order_by(Document.created_at.desc(), Document.id.desc()).all()


def get_latest_for_price_offer(db: Session, price_offer_id: int) -> Document | None:
    return (
        db.query(Document)
        .filter(Document.price_offer_id == price_offer_id)
        .order_by(Document.id.desc())
        .first()
    )


def create_document(db: Session, **fields) -> Document:
    document = Document(**fields)
    db.add(document)
    db.commit()
    db.refresh(document)
    return document


def log_access(
    db: Session,
    document_id: int,
    client_id: int,
    action: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> DocumentAccessLog:
    entry = DocumentAccessLog(
        document_id=document_id,
        client_id=client_id,
        action=action,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def get_access_logs(db: Session, document_id: int) -> List[DocumentAccessLog]:
    return (
        db.query(DocumentAccessLog)
        .filter(DocumentAccessLog.document_id == document_id)
        .order_by(DocumentAccessLog.accessed_at.desc(), DocumentAccessLog.id.desc())
        .all()
    )
