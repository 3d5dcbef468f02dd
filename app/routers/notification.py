# app/routers/notification.py

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_db
from app.models.client import Client
from app.schemas.common import CountResult
from app.schemas.notification import Notification, NotificationType, PaginatedNotifications
from app.services import notification_api as notification_service_api

router = APIRouter(prefix="/client/notifications")


@router.get("", response_model=PaginatedNotifications)
def get_client_notifications(
    type: NotificationType | None = Query(default=None, description="Filter by notification type"),
    is_read: bool | None = Query(default=None, description="true - only read, false - only unread"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Paginated notifications of the current client, newest first."""
    return notification_service_api.get_paginated(db, current_user, page, size, type=type, is_read=is_read)


@router.get("/unread-count", response_model=CountResult)
def get_unread_count(
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CountResult(count=notification_service_api.unread_count(db, current_user))


@router.patch("/mark-all-read", response_model=CountResult)
def read_all_notifications(
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Marks every unread notification as read. Returns how many changed."""
    return CountResult(count=notification_service_api.mark_all_as_read(db, current_user))


@router.patch("/{notification_id}/read", response_model=Notification)
def read_notification(
    notification_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return notification_service_api.mark_as_read(db, current_user, notification_id)


@router.delete("/read", response_model=CountResult)
def delete_read_notifications(
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CountResult(count=notification_service_api.delete_all_read(db, current_user))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notification_service_api.delete(db, current_user, notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
