# app/models/price_offer.py

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship

from app.db.session import Base

PRICE_OFFER_STATUSES = ("draft", "sent", "viewed", "accepted", "rejected", "expired")


class PriceOffer(Base):
    __tablename__ = "price_offers"

    id = Column(Integer, primary_key=True, index=True)
    offer_number = Column(String, unique=True, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    lta_id = Column(Integer, ForeignKey("ltas.id"), nullable=False)

    # Line items: product_id, sku, name_en, name_ar, quantity, unit_price
    items = Column(JSON, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="SAR", nullable=False)
    notes = Column(Text, nullable=True)

    status = Column(String, default="draft", nullable=False, index=True)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    viewed_at = Column(DateTime(timezone=True), nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    response_note = Column(Text, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now())

    client = relationship("Client")
    lta = relationship("Lta")

    __mapper_args__ = {"version_id_col": version}
