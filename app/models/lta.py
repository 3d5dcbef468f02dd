# app/models/lta.py
from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from sqlalchemy.schema import UniqueConstraint

from app.db.session import Base


class Lta(Base):
    """Long-Term Agreement: fixed contract pricing for a set of products."""
    __tablename__ = "ltas"

    id = Column(Integer, primary_key=True, index=True)
    name_en = Column(String, nullable=False)
    name_ar = Column(String, nullable=False)
    description_en = Column(Text, nullable=True)
    description_ar = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    # 'draft', 'active', 'inactive'
    status = Column(String, default="draft", nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("LtaProduct", back_populates="lta", cascade="all, delete-orphan")
    clients = relationship("LtaClient", back_populates="lta", cascade="all, delete-orphan")


class LtaProduct(Base):
    __tablename__ = "lta_products"
    id = Column(Integer, primary_key=True, index=True)
    lta_id = Column(Integer, ForeignKey("ltas.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    contract_price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="SAR", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lta = relationship("Lta", back_populates="products")
    product = relationship("Product")

    __table_args__ = (UniqueConstraint('lta_id', 'product_id', name='_lta_product_uc'),)


class LtaClient(Base):
    __tablename__ = "lta_clients"
    id = Column(Integer, primary_key=True, index=True)
    lta_id = Column(Integer, ForeignKey("ltas.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    lta = relationship("Lta", back_populates="clients")
    client = relationship("Client")

    __table_args__ = (UniqueConstraint('lta_id', 'client_id', name='_lta_client_uc'),)
