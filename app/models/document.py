# app/models/document.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from app.db.session import Base


class Document(Base):
    """A generated file (price offer PDF, invoice, contract) stored on disk."""
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    # 'price_offer', 'invoice', 'contract', 'other'
    document_type = Column(String, nullable=False, index=True)
    file_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)

    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=True, index=True)
    lta_id = Column(Integer, ForeignKey("ltas.id", ondelete="SET NULL"), nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)
    price_offer_id = Column(Integer, ForeignKey("price_offers.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    access_logs = relationship("DocumentAccessLog", back_populates="document", cascade="all, delete-orphan")


class DocumentAccessLog(Base):
    __tablename__ = "document_access_logs"

    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    # 'view' | 'download'
    action = Column(String, nullable=False)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    accessed_at = Column(DateTime(timezone=True), server_default=func.now())

    document = relationship("Document", back_populates="access_logs")
