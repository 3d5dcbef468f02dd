# app/crud/notification.py
from sqlalchemy.orm import Session
from sqlalchemy import update, delete, or_
from app.models.notification import Notification
from typing import List, Optional
from datetime import timedelta

from app.utils.dates import utcnow


def create_notification(
    db: Session,
    recipient_id: int,
    type: str,
    title: str,
    message: str,
    title_ar: str | None = None,
    message_ar: str | None = None,
    action_url: str | None = None,
    action_type: str | None = None,
    metadata_json: str | None = None,
    commit: bool = True,
) -> Notification:
    """Creates a notification for one recipient."""
    db_notification = Notification(
        recipient_id=recipient_id,
        type=type,
        title=title,
        message=message,
        title_ar=title_ar,
        message_ar=message_ar,
        action_url=action_url,
        action_type=action_type,
        metadata_json=metadata_json,
        is_read=False,
        created_at=utcnow(),
    )
    db.add(db_notification)
    if commit:
        db.commit()
        db.refresh(db_notification)
    else:
        db.flush()
    return db_notification


def _filtered(db: Session, recipient_id: int, type: Optional[str], is_read: Optional[bool]):
    query = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    if type is not None:
        query = query.filter(Notification.type == type)
    if is_read is not None:
        query = query.filter(Notification.is_read == is_read)
    return query


def get_notifications(
    db: Session,
    recipient_id: int,
    skip: int = 0,
    limit: int = 20,
    type: Optional[str] = None,
    is_read: Optional[bool] = None,
) -> List[Notification]:
    """Newest first."""
    query = _filtered(db, recipient_id, type, is_read)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(skip).limit(limit).all()


def count_notifications(
    db: Session, recipient_id: int, type: Optional[str] = None, is_read: Optional[bool] = None
) -> int:
    return _filtered(db, recipient_id, type, is_read).count()


def count_unread(db: Session, recipient_id: int) -> int:
    return count_notifications(db, recipient_id, is_read=False)


def get_notification(db: Session, notification_id: int) -> Notification | None:
    return db.get(Notification, notification_id)


def mark_notification_as_read(db: Session, recipient_id: int, notification_id: int) -> Notification | None:
    """Marks one notification as read. Returns None when it does not belong to the recipient."""
    stmt = update(Notification).where(
        Notification.id == notification_id,
        Notification.recipient_id == recipient_id
    ).values(is_read=True).returning(Notification.id)
    updated_id = db.execute(stmt).scalar_one_or_none()
    db.commit()
    if updated_id is None:
        return None
    notification = db.get(Notification, updated_id)
    db.refresh(notification)
    return notification


def mark_all_notifications_as_read(db: Session, recipient_id: int) -> int:
    stmt = update(Notification).where(
        Notification.recipient_id == recipient_id,
        Notification.is_read == False
    ).values(is_read=True)
    result = db.execute(stmt)
    db.commit()
    return result.rowcount


def delete_notification(db: Session, recipient_id: int, notification_id: int) -> bool:
    stmt = delete(Notification).where(
        Notification.id == notification_id,
        Notification.recipient_id == recipient_id
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0


def delete_read_notifications(db: Session, recipient_id: int) -> int:
    stmt = delete(Notification).where(
        Notification.recipient_id == recipient_id,
        Notification.is_read == True
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount


def smart_delete_old_notifications(
    db: Session,
    read_older_than_days: int,
    any_older_than_days: int
) -> int:
    """Deletes read notifications past the first threshold and any notification past the second."""
    now = utcnow()
    read_threshold = now - timedelta(days=read_older_than_days)
    any_threshold = now - timedelta(days=any_older_than_days)

    result = db.query(Notification).filter(
        or_(
            (Notification.is_read == True) & (Notification.created_at < read_threshold),
            Notification.created_at < any_threshold,
        )
    ).delete(synchronize_session=False)

    db.commit()
    return result
