# app/crud/price_offer.py
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.price_offer import PriceOffer


def get_price_offer(db: Session, offer_id: int) -> PriceOffer | None:
    return db.get(PriceOffer, offer_id)


def get_by_offer_number(db: Session, offer_number: str) -> PriceOffer | None:
    return db.query(PriceOffer).filter(PriceOffer.offer_number == offer_number).first()


def get_price_offers(
    db: Session,
    client_id: Optional[int] = None,
    status: Optional[str] = None,
    exclude_drafts: bool = False,
) -> List[PriceOffer]:
    query = db.query(PriceOffer)
    if client_id is not None:
        query = query.filter(PriceOffer.client_id == client_id)
    if status:
        query = query.filter(PriceOffer.status == status)
    if exclude_drafts:
        query = query.filter(PriceOffer.status != "draft")
    return query.order_by(PriceOffer.created_at.desc(), PriceOffer.id.desc()).all()


def count_offers_with_prefix(db: Session, prefix: str) -> int:
    return db.query(PriceOffer).filter(PriceOffer.offer_number.like(f"{prefix}%")).count()
