# app/routers/admin/orders.py

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.dependencies import get_admin_user, get_db
from app.models.client import Client
from app.schemas.common import PaginatedResponse
from app.schemas.order import Order, OrderHistoryEntry, OrderNoteCreate, OrderStatus, OrderStatusUpdate
from app.services import order as order_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=PaginatedResponse[Order])
def get_orders_list(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    status: OrderStatus | None = Query(default=None),
    client_id: int | None = Query(default=None),
    db: Session = Depends(get_db)
):
    """[ADMIN] All orders, newest first."""
    return order_service.get_orders_paginated(db, page, size, client_id=client_id, status_filter=status)


@router.get("/{order_id}", response_model=Order)
def get_order_details(
    order_id: int,
    admin: Client = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return order_service.get_order_for(db, order_id, admin)


@router.patch("/{order_id}/status", response_model=Order)
def update_order_status(
    order_id: int,
    status_update: OrderStatusUpdate,
    admin: Client = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """[ADMIN] Moves the order forward along the fulfilment flow, or cancels it."""
    return order_service.update_status(db, order_id, admin, status_update)


@router.post("/{order_id}/notes", response_model=OrderHistoryEntry, status_code=status.HTTP_201_CREATED)
def create_order_note(
    order_id: int,
    note_data: OrderNoteCreate,
    admin: Client = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return order_service.add_note(db, order_id, admin, note_data.note, note_data.is_admin_note)
