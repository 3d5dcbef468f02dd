# app/models/feedback.py
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship

from app.db.session import Base


class OrderFeedback(Base):
    __tablename__ = "order_feedback"

    id = Column(Integer, primary_key=True, index=True)
    # One feedback per order
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)
    ordering_process_rating = Column(Integer, nullable=True)
    product_quality_rating = Column(Integer, nullable=True)
    delivery_speed_rating = Column(Integer, nullable=True)
    communication_rating = Column(Integer, nullable=True)
    would_recommend = Column(Boolean, nullable=False)
    comments = Column(Text, nullable=True)

    admin_response = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order")


class IssueReport(Base):
    __tablename__ = "issue_reports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    # 'client' | 'admin'
    user_type = Column(String, nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)

    # 'bug', 'feature_request', 'confusion', 'other'
    issue_type = Column(String, nullable=False)
    # 'low', 'medium', 'high', 'critical'
    severity = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    steps = Column(Text, nullable=True)
    expected_behavior = Column(Text, nullable=True)
    actual_behavior = Column(Text, nullable=True)
    browser_info = Column(String, nullable=False)
    screen_size = Column(String, nullable=False)

    # 'open', 'investigating', 'resolved', 'closed'
    status = Column(String, default="open", nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    resolved_at = Column(DateTime(timezone=True), nullable=True)
