# app/models/client.py

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from app.db.session import Base

class Client(Base):
    """A portal account. Administrators are clients with is_admin set."""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name_en = Column(String, nullable=False)
    name_ar = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    username = Column(String, unique=True, index=True, nullable=False)

    is_admin = Column(Boolean, default=False, nullable=False, server_default='false')
    # 'en' | 'ar'
    language = Column(String(2), default="en", nullable=False, server_default='en')

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
