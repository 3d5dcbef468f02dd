# app/schemas/document.py
from datetime import datetime
from pydantic import BaseModel
from typing import Literal

DocumentType = Literal["price_offer", "invoice", "contract", "other"]


class Document(BaseModel):
    id: int
    document_type: DocumentType
    file_name: str
    client_id: int | None = None
    lta_id: int | None = None
    order_id: int | None = None
    price_offer_id: int | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class DocumentToken(BaseModel):
    token: str
    expires_at: datetime
    download_url: str


class DocumentAccessLog(BaseModel):
    id: int
    document_id: int
    client_id: int
    action: str
    ip_address: str | None = None
    user_agent: str | None = None
    accessed_at: datetime | None = None

    class Config:
        from_attributes = True
