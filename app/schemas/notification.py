# app/schemas/notification.py
from pydantic import BaseModel
from datetime import datetime
from typing import Literal

from app.schemas.common import PaginatedResponse

NotificationType = Literal[
    "order_created",
    "order_status_changed",
    "order_modification_requested",
    "order_modification_reviewed",
    "order_cancelled",
    "system",
    "price_request",
    "price_offer_ready",
    "price_request_sent",
    "issue_report",
]
ActionType = Literal["view_order", "review_request", "download_pdf", "view_request"]


class Notification(BaseModel):
    id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    title_ar: str | None = None
    message_ar: str | None = None
    is_read: bool
    action_url: str | None = None # Relative URL the client navigates to
    action_type: ActionType | None = None
    created_at: datetime

    class Config:
        from_attributes = True


PaginatedNotifications = PaginatedResponse[Notification]
