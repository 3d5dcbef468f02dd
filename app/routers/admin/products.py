# app/routers/admin/products.py

from fastapi import APIRouter, Depends, Query, Response, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_db
from app.schemas.common import PaginatedResponse
from app.schemas.product import Product, ProductCreate, ProductUpdate, StockAdjustment
from app.services import product as product_service

router = APIRouter()


@router.get("", response_model=PaginatedResponse[Product])
def get_products(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db)
):
    return product_service.get_products_paginated(db, page, size, category=category, search=search)


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return product_service.create_product(db, payload)


@router.post("/stock-adjustments", response_model=Product)
async def adjust_stock(
    payload: StockAdjustment,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """[ADMIN] Adds or removes stock; the result is clamped at zero."""
    return await product_service.adjust_stock(db, redis, payload)


@router.get("/{product_id}", response_model=Product)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_service.get_product_or_404(db, product_id)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    return await product_service.update_product(db, redis, product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    await product_service.delete_product(db, redis, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
