# app/services/order_modification.py

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.locales import error_detail
from app.crud import client as crud_client
from app.crud import order as crud_order
from app.models.client import Client
from app.models.order import OrderModification
from app.schemas.order import OrderModificationCreate, OrderModificationReview
from app.services import notification as notification_service
from app.services import order as order_service
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

MODIFIABLE_STATUSES = {"pending", "confirmed", "processing"}


def request_modification(
    db: Session, order_id: int, client: Client, data: OrderModificationCreate
) -> OrderModification:
    """Client proposes new items or a cancellation; the order waits for admin review."""
    order = order_service.get_order_for(db, order_id, client)
    if order.client_id != client.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_detail("ORDER_ACCESS_DENIED"))
    if order.status not in MODIFIABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("MODIFICATION_NOT_ALLOWED", status=order.status),
        )
    if crud_order.get_pending_modification(db, order.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("MODIFICATION_PENDING"))

    new_items = None
    new_total = None
    if data.modification_type == "items":
        if not data.new_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("MODIFICATION_ITEMS_REQUIRED")
            )
        _, new_items, new_total = order_service.price_items(db, client, data.new_items, check_stock=False)

    modification = OrderModification(
        order_id=order.id,
        requested_by=client.id,
        modification_type=data.modification_type,
        new_items=new_items,
        new_total_amount=new_total,
        reason=data.reason,
        previous_status=order.status,
        status="pending",
    )
    db.add(modification)

    previous_status = order.status
    order.status = "modification_requested"
    crud_order.add_history(
        db, order,
        status="modification_requested",
        previous_status=previous_status,
        changed_by=client.id,
        notes=data.reason,
    )
    db.flush()
    notification_service.modification_requested(db, modification, client, commit=False)
    db.commit()
    db.refresh(modification)
    logger.info(f"Modification {modification.id} requested for order {order.id}.")
    return modification


def list_for_order(db: Session, order_id: int, actor: Client) -> List[OrderModification]:
    order = order_service.get_order_for(db, order_id, actor)
    return crud_order.get_order_modifications(db, order.id)


def list_all(db: Session, status_filter: Optional[str] = None) -> List[OrderModification]:
    return crud_order.get_modifications(db, status=status_filter)


def review_modification(
    db: Session, modification_id: int, admin: Client, data: OrderModificationReview
) -> OrderModification:
    """
    Approve: items replace the order's lines (status restored) or the order is cancelled.
    Reject: the order returns to the status it had before the request.
    """
    modification = crud_order.get_modification(db, modification_id)
    if not modification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("MODIFICATION_NOT_FOUND"))
    if modification.status != "pending":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail("MODIFICATION_ALREADY_REVIEWED")
        )
    order = modification.order
    if order.status != "modification_requested":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("MODIFICATION_ORDER_CLOSED", status=order.status),
        )

    try:
        modification.status = data.status
        modification.admin_response = data.admin_response
        modification.reviewed_by = admin.id
        modification.reviewed_at = utcnow()

        if data.status == "approved" and modification.modification_type == "cancel":
            requester = crud_client.get_client(db, modification.requested_by)
            order_service.apply_cancellation(db, order, requester.id, modification.reason)
        else:
            if data.status == "approved" and modification.new_items:
                order.items = modification.new_items
                order.total_amount = modification.new_total_amount
            crud_order.add_history(
                db, order,
                status=modification.previous_status,
                previous_status=order.status,
                changed_by=admin.id,
                notes=data.admin_response,
            )
            order.status = modification.previous_status

        notification_service.modification_reviewed(db, modification, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(modification)
    logger.info(f"Modification {modification.id} {data.status} by admin {admin.id}.")
    return modification
