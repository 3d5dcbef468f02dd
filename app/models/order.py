# app/models/order.py

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship

from app.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


ORDER_STATUSES = (
    "pending",
    "confirmed",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
    "modification_requested",
)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    lta_id = Column(Integer, ForeignKey("ltas.id", ondelete="SET NULL"), nullable=True)

    # Snapshot of the ordered lines: product_id, sku, name_en, name_ar, quantity, price, currency
    items = Column(JSON, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    status = Column(String, default="pending", nullable=False, index=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(Integer, ForeignKey("clients.id"), nullable=True)

    # Optimistic concurrency counter, bumped by SQLAlchemy on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    client = relationship("Client", foreign_keys=[client_id])
    lta = relationship("Lta")
    history = relationship(
        "OrderHistory",
        back_populates="order",
        order_by=lambda: [OrderHistory.changed_at, OrderHistory.id],
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class OrderHistory(Base):
    """Append-only audit trail of order status changes."""
    __tablename__ = "order_history"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, nullable=False)
    previous_status = Column(String, nullable=True)
    changed_by = Column(Integer, ForeignKey("clients.id"), nullable=False)
    changed_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    notes = Column(Text, nullable=True)
    # Admin notes are hidden from the client timeline
    is_admin_note = Column(Boolean, default=False, nullable=False, server_default='false')

    order = relationship("Order", back_populates="history")


class OrderModification(Base):
    __tablename__ = "order_modifications"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    requested_by = Column(Integer, ForeignKey("clients.id"), nullable=False)

    # 'items' | 'cancel'
    modification_type = Column(String, nullable=False)
    new_items = Column(JSON, nullable=True)
    new_total_amount = Column(Numeric(10, 2), nullable=True)
    reason = Column(Text, nullable=False)
    # Status the order returns to when the request is rejected (or approved for items)
    previous_status = Column(String, nullable=False)

    # 'pending' | 'approved' | 'rejected'
    status = Column(String, default="pending", nullable=False, index=True)
    admin_response = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("clients.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    order = relationship("Order")
