# app/routers/price_offer.py

from typing import List

from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_current_user, get_db
from app.models.client import Client
from app.schemas.price_offer import PriceOffer, PriceOfferRespond
from app.services import price_offer as price_offer_service

router = APIRouter(prefix="/client/price-offers")


@router.get("", response_model=List[PriceOffer])
def get_my_price_offers(
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return price_offer_service.list_client_offers(db, current_user)


@router.get("/{offer_id}", response_model=PriceOffer)
def get_my_price_offer(
    offer_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Opening a sent offer marks it as viewed."""
    return price_offer_service.view_offer(db, offer_id, current_user)


@router.patch("/{offer_id}/status", response_model=PriceOffer)
async def respond_to_price_offer(
    offer_id: int,
    payload: PriceOfferRespond,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """Accept or reject. Accepting activates the linked LTA with the offer's prices."""
    return await price_offer_service.respond_to_offer(db, redis, offer_id, current_user, payload)
