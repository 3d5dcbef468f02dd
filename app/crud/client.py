# app/crud/client.py
from typing import List
from sqlalchemy.orm import Session

from app.models.client import Client


def get_client(db: Session, client_id: int) -> Client | None:
    return db.get(Client, client_id)


def get_client_by_username(db: Session, username: str) -> Client | None:
    return db.query(Client).filter(Client.username == username).first()


def get_admins(db: Session) -> List[Client]:
    return db.query(Client).filter(Client.is_admin == True).order_by(Client.id).all()


def create_client(
    db: Session,
    username: str,
    name_en: str,
    name_ar: str,
    email: str | None = None,
    is_admin: bool = False,
    language: str = "en",
) -> Client:
    client = Client(
        username=username,
        name_en=name_en,
        name_ar=name_ar,
        email=email,
        is_admin=is_admin,
        language=language,
    )
    db.add(client)
    db.commit()
    db.refresh(client)
    return client
