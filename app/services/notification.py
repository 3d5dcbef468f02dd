# app/services/notification.py

import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.locales import translate
from app.crud import client as crud_client
from app.crud import notification as crud_notification
from app.models.feedback import IssueReport
from app.models.client import Client
from app.models.notification import Notification
from app.models.order import Order, OrderModification
from app.models.price_offer import PriceOffer

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    recipient_id: int,
    type: str,
    title_key: str,
    message_key: str,
    action_url: str | None = None,
    action_type: str | None = None,
    metadata: Optional[Dict[str, Any]] = None,
    commit: bool = True,
    **fmt,
) -> Notification:
    """Creates one notification with English and Arabic copy."""
    notification = crud_notification.create_notification(
        db,
        recipient_id=recipient_id,
        type=type,
        title=translate(title_key, "en", **fmt),
        message=translate(message_key, "en", **fmt),
        title_ar=translate(title_key, "ar", **fmt),
        message_ar=translate(message_key, "ar", **fmt),
        action_url=action_url,
        action_type=action_type,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
        commit=commit,
    )
    logger.info(f"Notification '{type}' created for client {recipient_id}.")
    return notification


def notify_admins(db: Session, type: str, title_key: str, message_key: str, commit: bool = True, **kwargs) -> int:
    """Sends the same notification to every administrator. Returns the number created."""
    admins = crud_client.get_admins(db)
    if not admins:
        logger.warning(f"No administrators to notify about '{type}'.")
        return 0
    for admin in admins:
        notify(db, admin.id, type, title_key, message_key, commit=False, **kwargs)
    if commit:
        db.commit()
    return len(admins)


# --- Business events ---

def order_created(db: Session, order: Order, client: Client, commit: bool = True) -> int:
    return notify_admins(
        db,
        "order_created",
        "NOTIFY_ORDER_CREATED_TITLE",
        "NOTIFY_ORDER_CREATED_MESSAGE",
        action_url=f"/admin/orders/{order.id}",
        action_type="view_order",
        metadata={"order_id": order.id},
        commit=commit,
        client=client.name_en,
        order_id=order.id,
        total=f"{order.total_amount} SAR",
    )


def order_status_changed(db: Session, order: Order, commit: bool = True) -> Notification:
    return notify(
        db,
        order.client_id,
        "order_status_changed",
        "NOTIFY_ORDER_STATUS_TITLE",
        "NOTIFY_ORDER_STATUS_MESSAGE",
        action_url=f"/orders/{order.id}",
        action_type="view_order",
        metadata={"order_id": order.id, "status": order.status},
        commit=commit,
        order_id=order.id,
        status=order.status,
    )


def order_cancelled_by_client(db: Session, order: Order, client: Client, commit: bool = True) -> int:
    return notify_admins(
        db,
        "order_cancelled",
        "NOTIFY_ORDER_CANCELLED_TITLE",
        "NOTIFY_ORDER_CANCELLED_MESSAGE",
        action_url=f"/admin/orders/{order.id}",
        action_type="view_order",
        metadata={"order_id": order.id},
        commit=commit,
        client=client.name_en,
        order_id=order.id,
        reason=order.cancellation_reason,
    )


def modification_requested(db: Session, modification: OrderModification, client: Client, commit: bool = True) -> int:
    return notify_admins(
        db,
        "order_modification_requested",
        "NOTIFY_MODIFICATION_REQUESTED_TITLE",
        "NOTIFY_MODIFICATION_REQUESTED_MESSAGE",
        action_url=f"/admin/order-modifications/{modification.id}",
        action_type="review_request",
        metadata={"order_id": modification.order_id, "modification_id": modification.id},
        commit=commit,
        client=client.name_en,
        order_id=modification.order_id,
    )


def modification_reviewed(db: Session, modification: OrderModification, commit: bool = True) -> Notification:
    title_key = (
        "NOTIFY_MODIFICATION_APPROVED_TITLE"
        if modification.status == "approved"
        else "NOTIFY_MODIFICATION_REJECTED_TITLE"
    )
    return notify(
        db,
        modification.requested_by,
        "order_modification_reviewed",
        title_key,
        "NOTIFY_MODIFICATION_REVIEWED_MESSAGE",
        action_url=f"/orders/{modification.order_id}",
        action_type="view_order",
        metadata={"order_id": modification.order_id, "modification_id": modification.id},
        commit=commit,
        order_id=modification.order_id,
    )


def price_offer_ready(db: Session, offer: PriceOffer, document_id: int | None, commit: bool = True) -> Notification:
    if document_id is not None:
        action_url, action_type = f"/api/documents/{document_id}/download", "download_pdf"
    else:
        action_url, action_type = f"/price-offers/{offer.id}", "view_request"
    return notify(
        db,
        offer.client_id,
        "price_offer_ready",
        "NOTIFY_PRICE_OFFER_READY_TITLE",
        "NOTIFY_PRICE_OFFER_READY_MESSAGE",
        action_url=action_url,
        action_type=action_type,
        metadata={"price_offer_id": offer.id, "document_id": document_id},
        commit=commit,
        offer_number=offer.offer_number,
    )


def price_offer_responded(db: Session, offer: PriceOffer, client: Client, commit: bool = True) -> int:
    return notify_admins(
        db,
        "price_request",
        "NOTIFY_PRICE_OFFER_RESPONDED_TITLE",
        "NOTIFY_PRICE_OFFER_RESPONDED_MESSAGE",
        action_url=f"/admin/price-offers/{offer.id}",
        action_type="view_request",
        metadata={"price_offer_id": offer.id, "status": offer.status},
        commit=commit,
        client=client.name_en,
        status=offer.status,
        offer_number=offer.offer_number,
    )


def issue_reported(db: Session, report: IssueReport, commit: bool = True) -> int:
    return notify_admins(
        db,
        "issue_report",
        "NOTIFY_ISSUE_REPORT_TITLE",
        "NOTIFY_ISSUE_REPORT_MESSAGE",
        action_url=f"/admin/issues/{report.id}",
        metadata={"issue_id": report.id, "severity": report.severity},
        commit=commit,
        severity=report.severity.upper(),
        title=report.title,
    )
