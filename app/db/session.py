# app/db/session.py

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Creates all tables that do not exist yet."""
    # Model modules must be imported so their tables are registered on Base.metadata
    from app.models import client, product, lta, order, price_offer, notification, feedback, document  # noqa: F401
    Base.metadata.create_all(bind=engine)
