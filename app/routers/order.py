# app/routers/order.py

from typing import List

from fastapi import APIRouter, Depends, Query, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_current_user, get_db
from app.models.client import Client
from app.schemas.common import PaginatedResponse
from app.schemas.order import (
    Order, OrderCancel, OrderCreate, OrderHistoryEntry, OrderModification, OrderModificationCreate, OrderStatus,
)
from app.services import order as order_service
from app.services import order_modification as modification_service

router = APIRouter()


@router.get("/client/orders", response_model=PaginatedResponse[Order])
def get_my_orders(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    status: OrderStatus | None = Query(default=None),
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return order_service.get_orders_paginated(db, page, size, client_id=current_user.id, status_filter=status)


@router.post("/client/orders", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """
    Places an order from LTA-contracted products.
    Prices must match the contract; stock is reserved immediately.
    """
    return await order_service.create_order(db, redis, current_user, order_data)


@router.get("/client/orders/{order_id}", response_model=Order)
def get_my_order(
    order_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return order_service.get_order_for(db, order_id, current_user)


@router.get("/orders/{order_id}/history", response_model=List[OrderHistoryEntry])
def get_order_history(
    order_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Status timeline, oldest first. Admin notes are only visible to admins."""
    return order_service.get_timeline(db, order_id, current_user)


@router.post("/orders/{order_id}/cancel", response_model=Order)
def cancel_order(
    order_id: int,
    payload: OrderCancel,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return order_service.cancel_order(db, order_id, current_user, payload.reason)


@router.post("/orders/{order_id}/modify", response_model=OrderModification, status_code=status.HTTP_201_CREATED)
def request_order_modification(
    order_id: int,
    payload: OrderModificationCreate,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return modification_service.request_modification(db, order_id, current_user, payload)


@router.get("/orders/{order_id}/modifications", response_model=List[OrderModification])
def get_order_modifications(
    order_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return modification_service.list_for_order(db, order_id, current_user)
