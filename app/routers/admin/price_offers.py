# app/routers/admin/price_offers.py

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.price_offer import PriceOffer, PriceOfferCreate, PriceOfferStatus, PriceOfferUpdate
from app.services import price_offer as price_offer_service

router = APIRouter()


@router.get("", response_model=List[PriceOffer])
def get_price_offers(
    client_id: int | None = Query(default=None),
    status: PriceOfferStatus | None = Query(default=None),
    db: Session = Depends(get_db)
):
    return price_offer_service.list_offers(db, client_id=client_id, status_filter=status)


@router.post("", response_model=PriceOffer, status_code=status.HTTP_201_CREATED)
def create_price_offer(payload: PriceOfferCreate, db: Session = Depends(get_db)):
    """[ADMIN] Creates a draft offer. Totals are computed from the line items."""
    return price_offer_service.create_offer(db, payload)


@router.get("/{offer_id}", response_model=PriceOffer)
def get_price_offer(offer_id: int, db: Session = Depends(get_db)):
    return price_offer_service.get_offer(db, offer_id)


@router.patch("/{offer_id}", response_model=PriceOffer)
def update_price_offer(offer_id: int, payload: PriceOfferUpdate, db: Session = Depends(get_db)):
    return price_offer_service.update_offer(db, offer_id, payload)


@router.delete("/{offer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_price_offer(offer_id: int, db: Session = Depends(get_db)):
    price_offer_service.delete_offer(db, offer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{offer_id}/send", response_model=PriceOffer)
def send_price_offer(offer_id: int, db: Session = Depends(get_db)):
    """[ADMIN] draft -> sent; the client gets a price_offer_ready notification."""
    return price_offer_service.send_offer(db, offer_id)
