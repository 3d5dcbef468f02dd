# app/services/notification_api.py
import math
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.locales import error_detail
from app.crud import notification as crud_notification
from app.models.client import Client
from app.models.notification import Notification
from app.schemas.notification import PaginatedNotifications


def get_paginated(
    db: Session,
    client: Client,
    page: int,
    size: int,
    type: Optional[str] = None,
    is_read: Optional[bool] = None,
) -> PaginatedNotifications:
    """Builds a paginated notification list."""
    skip = (page - 1) * size

    notifications = crud_notification.get_notifications(
        db, recipient_id=client.id, skip=skip, limit=size, type=type, is_read=is_read
    )
    total_items = crud_notification.count_notifications(db, recipient_id=client.id, type=type, is_read=is_read)
    total_pages = math.ceil(total_items / size) if total_items > 0 else 1

    return PaginatedNotifications(
        total_items=total_items,
        total_pages=total_pages,
        current_page=page,
        size=size,
        items=notifications
    )


def unread_count(db: Session, client: Client) -> int:
    return crud_notification.count_unread(db, recipient_id=client.id)


def mark_as_read(db: Session, client: Client, notification_id: int) -> Notification:
    notification = crud_notification.mark_notification_as_read(
        db, recipient_id=client.id, notification_id=notification_id
    )
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("NOTIFICATION_NOT_FOUND"))
    return notification


def mark_all_as_read(db: Session, client: Client) -> int:
    return crud_notification.mark_all_notifications_as_read(db, recipient_id=client.id)


def delete(db: Session, client: Client, notification_id: int):
    if not crud_notification.delete_notification(db, recipient_id=client.id, notification_id=notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("NOTIFICATION_NOT_FOUND"))


def delete_all_read(db: Session, client: Client) -> int:
    return crud_notification.delete_read_notifications(db, recipient_id=client.id)
