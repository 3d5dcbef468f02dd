# app/schemas/order.py
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

OrderStatus = Literal[
    "pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "modification_requested"
]


# A line as submitted by the client
class OrderItemCreate(BaseModel):
    product_id: int
    sku: str
    quantity: int = Field(gt=0)
    price: Decimal
    lta_id: int


class OrderCreate(BaseModel):
    items: List[OrderItemCreate]


# A line as stored on the order, priced from the LTA contract
class OrderLineItem(BaseModel):
    product_id: int
    sku: str
    name_en: str
    name_ar: str
    quantity: int
    price: Decimal
    currency: str
    lta_id: int | None = None


class Order(BaseModel):
    id: int
    client_id: int
    lta_id: int | None
    items: List[OrderLineItem]
    total_amount: Decimal
    status: OrderStatus
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class OrderHistoryEntry(BaseModel):
    id: int
    order_id: int
    status: str
    previous_status: str | None
    changed_by: int
    changed_at: datetime
    notes: str | None = None
    is_admin_note: bool

    class Config:
        from_attributes = True


class OrderCancel(BaseModel):
    reason: str

    @field_validator('reason', mode='before')
    @classmethod
    def strip_reason(cls, v):
        return v.strip() if isinstance(v, str) else v


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = None
    is_admin_note: bool = False
    cancellation_reason: Optional[str] = None


class OrderNoteCreate(BaseModel):
    note: str
    is_admin_note: bool = True


class OrderModificationCreate(BaseModel):
    modification_type: Literal["items", "cancel"]
    new_items: Optional[List[OrderItemCreate]] = None
    reason: str


class OrderModification(BaseModel):
    id: int
    order_id: int
    requested_by: int
    modification_type: str
    new_items: Optional[List[OrderLineItem]] = None
    new_total_amount: Decimal | None = None
    reason: str
    previous_status: str
    status: Literal["pending", "approved", "rejected"]
    admin_response: str | None = None
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class OrderModificationReview(BaseModel):
    status: Literal["approved", "rejected"]
    admin_response: Optional[str] = None
