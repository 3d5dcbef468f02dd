# app/schemas/price_offer.py
from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

PriceOfferStatus = Literal["draft", "sent", "viewed", "accepted", "rejected", "expired"]


class PriceOfferItem(BaseModel):
    product_id: int
    sku: str
    name_en: str
    name_ar: str
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)


class PriceOfferCreate(BaseModel):
    offer_number: Optional[str] = None # Generated when omitted
    client_id: int
    lta_id: int
    items: List[PriceOfferItem]
    tax: Decimal = Decimal("0")
    currency: str = "SAR"
    notes: Optional[str] = None
    valid_until: datetime


class PriceOffer(BaseModel):
    id: int
    offer_number: str
    client_id: int
    lta_id: int
    items: List[PriceOfferItem]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    notes: str | None = None
    status: PriceOfferStatus
    valid_until: datetime
    sent_at: datetime | None = None
    viewed_at: datetime | None = None
    responded_at: datetime | None = None
    response_note: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class PriceOfferRespond(BaseModel):
    status: Literal["accepted", "rejected"]
    note: Optional[str] = None


class PriceOfferUpdate(BaseModel):
    items: Optional[List[PriceOfferItem]] = None
    tax: Optional[Decimal] = None
    notes: Optional[str] = None
    valid_until: Optional[datetime] = None
