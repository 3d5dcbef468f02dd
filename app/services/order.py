# app/services/order.py

import logging
import math
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.locales import error_detail
from app.crud import lta as crud_lta
from app.crud import order as crud_order
from app.crud import product as crud_product
from app.models.client import Client
from app.models.order import Order, OrderHistory
from app.schemas.common import PaginatedResponse
from app.schemas.order import Order as OrderSchema, OrderCreate, OrderItemCreate, OrderStatusUpdate
from app.services import catalog as catalog_service
from app.services import notification as notification_service
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

FULFILMENT_FLOW = ("pending", "confirmed", "processing", "shipped", "delivered")
# Statuses from which the owning client or an admin may cancel
CANCELLABLE_STATUSES = {"pending", "confirmed", "processing", "modification_requested"}
TERMINAL_STATUSES = {"delivered", "cancelled"}
CENTS = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS)


def get_order_for(db: Session, order_id: int, actor: Client) -> Order:
    """Loads an order the actor may see: their own, or any for an admin."""
    order = crud_order.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("ORDER_NOT_FOUND"))
    if order.client_id != actor.id and not actor.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_detail("ORDER_ACCESS_DENIED"))
    return order


def price_items(
    db: Session, client: Client, items: List[OrderItemCreate], check_stock: bool = True
) -> Tuple[int, List[Dict], Decimal]:
    """
    Validates submitted lines against the LTA contract and returns
    (lta_id, stored line items, total). Raises HTTPException on the first problem.
    """
    if not items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("ORDER_EMPTY"))

    lta_ids = {item.lta_id for item in items}
    if len(lta_ids) > 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("ORDER_MIXED_LTA"))
    lta_id = lta_ids.pop()

    lta = crud_lta.get_lta(db, lta_id)
    if not lta or lta.status != "active" or not crud_lta.is_client_assigned(db, lta_id, client.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_detail("LTA_NOT_ASSIGNED"))

    line_items = []
    total = Decimal("0")
    requested: Dict[int, int] = {}
    for item in items:
        lta_product = crud_lta.get_lta_product(db, lta_id, item.product_id)
        if not lta_product:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_detail("PRODUCT_NOT_IN_LTA", sku=item.sku),
            )
        contract_price = _money(lta_product.contract_price)
        if _money(item.price) != contract_price:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_detail("INVALID_PRICE", sku=item.sku),
            )

        product = lta_product.product
        requested[product.id] = requested.get(product.id, 0) + item.quantity
        if check_stock and requested[product.id] > product.stock_quantity:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=error_detail("INSUFFICIENT_STOCK", name=product.name_en),
            )

        line_items.append({
            "product_id": product.id,
            "sku": product.sku,
            "name_en": product.name_en,
            "name_ar": product.name_ar,
            "quantity": item.quantity,
            "price": str(contract_price),
            "currency": lta_product.currency,
            "lta_id": lta_id,
        })
        total += contract_price * item.quantity

    return lta_id, line_items, total.quantize(CENTS)


async def create_order(db: Session, redis: Redis, client: Client, order_data: OrderCreate) -> Order:
    """
    Places an order priced from the LTA contract.
    Order row, stock decrement, first history row and admin notifications commit together.
    """
    lta_id, line_items, total = price_items(db, client, order_data.items)

    try:
        for line in line_items:
            product = crud_product.get_product(db, line["product_id"])
            product.stock_quantity -= line["quantity"]

        order = Order(
            client_id=client.id,
            lta_id=lta_id,
            items=line_items,
            total_amount=total,
            status="pending",
        )
        db.add(order)
        db.flush()
        crud_order.add_history(db, order, status="pending", previous_status=None, changed_by=client.id)
        notification_service.order_created(db, order, client, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to create order for client {client.id}", exc_info=True)
        raise
    db.refresh(order)
    logger.info(f"Order {order.id} created for client {client.id}, total {total}.")

    await catalog_service.invalidate_for_lta(db, redis, lta_id)
    return order


def get_orders_paginated(
    db: Session,
    page: int,
    size: int,
    client_id: Optional[int] = None,
    status_filter: Optional[str] = None,
) -> PaginatedResponse[OrderSchema]:
    skip = (page - 1) * size
    orders = crud_order.get_orders(db, client_id=client_id, status=status_filter, skip=skip, limit=size)
    total_items = crud_order.count_orders(db, client_id=client_id, status=status_filter)
    total_pages = math.ceil(total_items / size) if total_items > 0 else 1
    return PaginatedResponse[OrderSchema](
        total_items=total_items,
        total_pages=total_pages,
        current_page=page,
        size=size,
        items=orders,
    )


def get_timeline(db: Session, order_id: int, actor: Client) -> List[OrderHistory]:
    """History rows in changed_at order. Admin notes are only shown to admins."""
    order = get_order_for(db, order_id, actor)
    return crud_order.get_history(db, order.id, include_admin_notes=actor.is_admin)


def apply_cancellation(db: Session, order: Order, actor_id: int, reason: str) -> OrderHistory:
    """Moves an order to cancelled and appends the history row. Does not commit."""
    if order.status == "cancelled":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("ORDER_ALREADY_CANCELLED"))
    if order.status not in CANCELLABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("ORDER_NOT_CANCELLABLE", status=order.status),
        )
    previous_status = order.status
    order.status = "cancelled"
    order.cancellation_reason = reason
    order.cancelled_at = utcnow()
    order.cancelled_by = actor_id
    pending = crud_order.get_pending_modification(db, order.id)
    if pending and pending.status == "pending":
        # A request left open would later restore its previous_status
        pending.status = "rejected"
        pending.admin_response = "Order cancelled"
        pending.reviewed_at = utcnow()
    return crud_order.add_history(
        db, order, status="cancelled", previous_status=previous_status, changed_by=actor_id, notes=reason
    )


def cancel_order(db: Session, order_id: int, actor: Client, reason: str | None) -> Order:
    if not reason or not reason.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("CANCELLATION_REASON_REQUIRED")
        )
    order = get_order_for(db, order_id, actor)
    apply_cancellation(db, order, actor.id, reason.strip())

    if actor.id == order.client_id:
        notification_service.order_cancelled_by_client(db, order, actor, commit=False)
    else:
        notification_service.order_status_changed(db, order, commit=False)
    db.commit()
    db.refresh(order)
    role = "admin" if actor.is_admin else "client"
    logger.info(f"Order {order.id} cancelled by {role} {actor.id}.")
    return order


def _is_forward_move(current: str, target: str) -> bool:
    if current not in FULFILMENT_FLOW or target not in FULFILMENT_FLOW:
        return False
    return FULFILMENT_FLOW.index(target) > FULFILMENT_FLOW.index(current)


def update_status(db: Session, order_id: int, admin: Client, data: OrderStatusUpdate) -> Order:
    """Admin status change along the fulfilment flow, or a cancellation."""
    order = get_order_for(db, order_id, admin)

    if data.status == "cancelled":
        reason = (data.cancellation_reason or data.notes or "").strip()
        if not reason:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("CANCELLATION_REASON_REQUIRED")
            )
        apply_cancellation(db, order, admin.id, reason)
    else:
        if not _is_forward_move(order.status, data.status):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_detail("INVALID_ORDER_TRANSITION", current=order.status, target=data.status),
            )
        previous_status = order.status
        order.status = data.status
        crud_order.add_history(
            db, order,
            status=data.status,
            previous_status=previous_status,
            changed_by=admin.id,
            notes=data.notes,
            is_admin_note=data.is_admin_note,
        )

    notification_service.order_status_changed(db, order, commit=False)
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order.id} moved to '{order.status}' by admin {admin.id}.")
    return order


def add_note(db: Session, order_id: int, admin: Client, note: str, is_admin_note: bool = True) -> OrderHistory:
    """Appends a note to the timeline without changing the status."""
    order = get_order_for(db, order_id, admin)
    entry = crud_order.add_history(
        db, order,
        status=order.status,
        previous_status=order.status,
        changed_by=admin.id,
        notes=note,
        is_admin_note=is_admin_note,
    )
    db.commit()
    db.refresh(entry)
    return entry
