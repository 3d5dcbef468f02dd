# app/routers/admin/ltas.py

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.crud import lta as crud_lta
from app.dependencies import get_db
from app.schemas.lta import (
    Lta, LtaClient, LtaClientAssign, LtaCreate, LtaProduct, LtaProductAssign, LtaProductBulkAssign,
    LtaProductUpdate, LtaStatus, LtaUpdate,
)
from app.services import lta as lta_service

router = APIRouter()


@router.get("", response_model=List[Lta])
def get_ltas(status: LtaStatus | None = Query(default=None), db: Session = Depends(get_db)):
    return crud_lta.get_ltas(db, status=status)


@router.post("", response_model=Lta, status_code=status.HTTP_201_CREATED)
def create_lta(payload: LtaCreate, db: Session = Depends(get_db)):
    return lta_service.create_lta(db, payload)


@router.get("/{lta_id}", response_model=Lta)
def get_lta(lta_id: int, db: Session = Depends(get_db)):
    return lta_service.get_lta_or_404(db, lta_id)


@router.patch("/{lta_id}", response_model=Lta)
async def update_lta(
    lta_id: int,
    payload: LtaUpdate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    return await lta_service.update_lta(db, redis, lta_id, payload)


@router.delete("/{lta_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lta(lta_id: int, db: Session = Depends(get_db), redis: Redis = Depends(get_redis_client)):
    await lta_service.delete_lta(db, redis, lta_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Contract prices ---

@router.get("/{lta_id}/products", response_model=List[LtaProduct])
def get_lta_products(lta_id: int, db: Session = Depends(get_db)):
    return lta_service.list_products(db, lta_id)


@router.post("/{lta_id}/products", response_model=LtaProduct)
async def assign_lta_product(
    lta_id: int,
    payload: LtaProductAssign,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """Creates the contract price or replaces the existing one."""
    result = await lta_service.assign_products(db, redis, lta_id, [payload])
    return result[0]


@router.post("/{lta_id}/products/bulk", response_model=List[LtaProduct])
async def bulk_assign_lta_products(
    lta_id: int,
    payload: LtaProductBulkAssign,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    return await lta_service.assign_products(db, redis, lta_id, payload.products)


@router.patch("/{lta_id}/products/{product_id}", response_model=LtaProduct)
async def update_lta_product_price(
    lta_id: int,
    product_id: int,
    payload: LtaProductUpdate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    existing = crud_lta.get_lta_product(db, lta_id, product_id)
    currency = payload.currency or (existing.currency if existing else "SAR")
    assignment = LtaProductAssign(product_id=product_id, contract_price=payload.contract_price, currency=currency)
    result = await lta_service.assign_products(db, redis, lta_id, [assignment])
    return result[0]


@router.delete("/{lta_id}/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_lta_product(
    lta_id: int,
    product_id: int,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    await lta_service.remove_product(db, redis, lta_id, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Client assignment ---

@router.get("/{lta_id}/clients", response_model=List[LtaClient])
def get_lta_clients(lta_id: int, db: Session = Depends(get_db)):
    lta_service.get_lta_or_404(db, lta_id)
    return crud_lta.get_lta_clients(db, lta_id)


@router.post("/{lta_id}/clients", response_model=LtaClient, status_code=status.HTTP_201_CREATED)
async def assign_lta_client(
    lta_id: int,
    payload: LtaClientAssign,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    return await lta_service.assign_client(db, redis, lta_id, payload.client_id)


@router.delete("/{lta_id}/clients/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_lta_client(
    lta_id: int,
    client_id: int,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    await lta_service.remove_client(db, redis, lta_id, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
