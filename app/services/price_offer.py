# app/services/price_offer.py

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.locales import error_detail
from app.crud import client as crud_client
from app.crud import document as crud_document
from app.crud import lta as crud_lta
from app.crud import price_offer as crud_price_offer
from app.models.client import Client
from app.models.price_offer import PriceOffer
from app.schemas.price_offer import PriceOfferCreate, PriceOfferItem, PriceOfferRespond, PriceOfferUpdate
from app.services import catalog as catalog_service
from app.services import notification as notification_service
from app.utils.dates import add_years, as_utc, utcnow

logger = logging.getLogger(__name__)

# Allowed moves; expiry is handled separately at read time
TRANSITIONS = {
    "draft": {"sent"},
    "sent": {"viewed", "accepted", "rejected", "expired"},
    "viewed": {"accepted", "rejected", "expired"},
    "accepted": set(),
    "rejected": set(),
    "expired": set(),
}
EXPIRABLE_STATUSES = {"sent", "viewed"}
CENTS = Decimal("0.01")


def _ensure_transition(offer: PriceOffer, target: str):
    if target not in TRANSITIONS.get(offer.status, set()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("INVALID_OFFER_TRANSITION", current=offer.status, target=target),
        )


def _totals(items: List[PriceOfferItem], tax: Decimal):
    subtotal = sum((item.unit_price * item.quantity for item in items), Decimal("0")).quantize(CENTS)
    return subtotal, Decimal(tax).quantize(CENTS), (subtotal + Decimal(tax)).quantize(CENTS)


def _stored_items(items: List[PriceOfferItem]) -> list:
    return [item.model_dump(mode="json") for item in items]


def _next_offer_number(db: Session) -> str:
    prefix = f"PO-{utcnow():%Y%m%d}-"
    sequence = crud_price_offer.count_offers_with_prefix(db, prefix) + 1
    return f"{prefix}{sequence:04d}"


def refresh_expiry(db: Session, offer: PriceOffer) -> PriceOffer:
    """Persists `expired` for a sent/viewed offer whose validity has passed."""
    if offer.status in EXPIRABLE_STATUSES and as_utc(offer.valid_until) < utcnow():
        offer.status = "expired"
        db.commit()
        db.refresh(offer)
        logger.info(f"Price offer {offer.offer_number} expired.")
    return offer


# --- Admin ---

def create_offer(db: Session, data: PriceOfferCreate) -> PriceOffer:
    if not crud_client.get_client(db, data.client_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("CLIENT_NOT_FOUND"))
    if not crud_lta.get_lta(db, data.lta_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("LTA_NOT_FOUND"))
    if not data.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("PRICE_OFFER_NO_ITEMS"))

    offer_number = data.offer_number or _next_offer_number(db)
    if crud_price_offer.get_by_offer_number(db, offer_number):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_detail("PRICE_OFFER_NUMBER_TAKEN", offer_number=offer_number),
        )

    subtotal, tax, total = _totals(data.items, data.tax)
    offer = PriceOffer(
        offer_number=offer_number,
        client_id=data.client_id,
        lta_id=data.lta_id,
        items=_stored_items(data.items),
        subtotal=subtotal,
        tax=tax,
        total=total,
        currency=data.currency,
        notes=data.notes,
        status="draft",
        valid_until=data.valid_until,
    )
    db.add(offer)
    db.commit()
    db.refresh(offer)
    logger.info(f"Price offer {offer.offer_number} created for client {offer.client_id}.")
    return offer


def get_offer(db: Session, offer_id: int) -> PriceOffer:
    offer = crud_price_offer.get_price_offer(db, offer_id)
    if not offer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("PRICE_OFFER_NOT_FOUND"))
    return refresh_expiry(db, offer)


def list_offers(db: Session, client_id: Optional[int] = None, status_filter: Optional[str] = None) -> List[PriceOffer]:
    offers = crud_price_offer.get_price_offers(db, client_id=client_id, status=status_filter)
    return [refresh_expiry(db, offer) for offer in offers]


def update_offer(db: Session, offer_id: int, data: PriceOfferUpdate) -> PriceOffer:
    """Drafts only."""
    offer = get_offer(db, offer_id)
    if offer.status != "draft":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("INVALID_OFFER_TRANSITION", current=offer.status, target="draft"),
        )
    if data.items is not None:
        if not data.items:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("PRICE_OFFER_NO_ITEMS"))
        offer.items = _stored_items(data.items)
    if data.tax is not None:
        offer.tax = data.tax
    if data.notes is not None:
        offer.notes = data.notes
    if data.valid_until is not None:
        offer.valid_until = data.valid_until

    items = [PriceOfferItem.model_validate(item) for item in offer.items]
    offer.subtotal, offer.tax, offer.total = _totals(items, Decimal(str(offer.tax)))
    db.commit()
    db.refresh(offer)
    return offer


def delete_offer(db: Session, offer_id: int):
    offer = get_offer(db, offer_id)
    if offer.status != "draft":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("INVALID_OFFER_TRANSITION", current=offer.status, target="deleted"),
        )
    db.delete(offer)
    db.commit()


def send_offer(db: Session, offer_id: int) -> PriceOffer:
    """draft -> sent, and tells the client. Links the latest generated PDF if there is one."""
    offer = get_offer(db, offer_id)
    _ensure_transition(offer, "sent")
    offer.status = "sent"
    offer.sent_at = utcnow()

    document = crud_document.get_latest_for_price_offer(db, offer.id)
    notification_service.price_offer_ready(
        db, offer, document.id if document else None, commit=False
    )
    db.commit()
    db.refresh(offer)
    logger.info(f"Price offer {offer.offer_number} sent to client {offer.client_id}.")
    return offer


# --- Client ---

def _get_client_offer(db: Session, offer_id: int, client: Client) -> PriceOffer:
    offer = crud_price_offer.get_price_offer(db, offer_id)
    # Drafts are invisible to clients
    if not offer or offer.client_id != client.id or offer.status == "draft":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("PRICE_OFFER_NOT_FOUND"))
    return refresh_expiry(db, offer)


def list_client_offers(db: Session, client: Client) -> List[PriceOffer]:
    offers = crud_price_offer.get_price_offers(db, client_id=client.id, exclude_drafts=True)
    return [refresh_expiry(db, offer) for offer in offers]


def view_offer(db: Session, offer_id: int, client: Client) -> PriceOffer:
    """Opening a sent offer marks it viewed."""
    offer = _get_client_offer(db, offer_id, client)
    if offer.status == "sent":
        offer.status = "viewed"
        offer.viewed_at = utcnow()
        db.commit()
        db.refresh(offer)
    return offer


def accept_offer(db: Session, offer: PriceOffer, client: Client, note: str | None) -> PriceOffer:
    """
    Offer -> accepted, linked LTA draft -> active for one year, every line
    upserted as an LtaProduct and the client assigned to the LTA.
    One transaction: any failure rolls everything back.
    """
    now = utcnow()
    try:
        offer.status = "accepted"
        offer.responded_at = now
        offer.response_note = note

        lta = offer.lta
        if lta.status == "draft":
            lta.status = "active"
            lta.start_date = now
            lta.end_date = add_years(now, 1)

        for item in offer.items:
            crud_lta.upsert_lta_product(
                db,
                lta_id=lta.id,
                product_id=item["product_id"],
                contract_price=Decimal(str(item["unit_price"])),
                currency=offer.currency,
            )
        crud_lta.assign_client(db, lta_id=lta.id, client_id=offer.client_id)
        notification_service.price_offer_responded(db, offer, client, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to accept price offer {offer.id}; all changes rolled back.", exc_info=True)
        raise
    db.refresh(offer)
    logger.info(f"Price offer {offer.offer_number} accepted; LTA {offer.lta_id} active.")
    return offer


async def respond_to_offer(
    db: Session, redis: Redis, offer_id: int, client: Client, data: PriceOfferRespond
) -> PriceOffer:
    offer = _get_client_offer(db, offer_id, client)
    if offer.status == "expired":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("PRICE_OFFER_EXPIRED"))
    _ensure_transition(offer, data.status)

    if data.status == "accepted":
        offer = accept_offer(db, offer, client, data.note)
        await catalog_service.invalidate_for_lta(db, redis, offer.lta_id)
        return offer

    offer.status = "rejected"
    offer.responded_at = utcnow()
    offer.response_note = data.note
    notification_service.price_offer_responded(db, offer, client, commit=False)
    db.commit()
    db.refresh(offer)
    logger.info(f"Price offer {offer.offer_number} rejected by client {client.id}.")
    return offer
