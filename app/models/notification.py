# app/models/notification.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, func, Boolean
from app.db.session import Base
from sqlalchemy.orm import relationship

NOTIFICATION_TYPES = (
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
)

ACTION_TYPES = ("view_order", "review_request", "download_pdf", "view_request")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    # One of NOTIFICATION_TYPES
    type = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    title_ar = Column(String, nullable=True)
    message_ar = Column(Text, nullable=True)

    action_url = Column(String, nullable=True)
    # One of ACTION_TYPES
    action_type = Column(String, nullable=True)
    metadata_json = Column(Text, nullable=True)

    # Only ever flips false -> true
    is_read = Column(Boolean, default=False, nullable=False, server_default='false')
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    recipient = relationship("Client")
