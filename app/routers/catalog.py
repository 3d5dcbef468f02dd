# app/routers/catalog.py

from typing import List

from fastapi import APIRouter, Depends, Query
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.crud import lta as crud_lta
from app.dependencies import get_current_user, get_db
from app.models.client import Client
from app.schemas.lta import Lta
from app.schemas.product import CatalogProduct
from app.services import catalog as catalog_service

router = APIRouter()


@router.get("/products", response_model=List[CatalogProduct])
async def get_catalog(
    category: str | None = Query(default=None),
    search: str | None = Query(default=None, description="SKU or product name"),
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """Products available to the client through active LTAs, with contract prices."""
    return await catalog_service.get_client_catalog(db, redis, current_user, category=category, search=search)


@router.get("/client/ltas", response_model=List[Lta])
def get_my_ltas(
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return crud_lta.get_client_ltas(db, current_user.id)
