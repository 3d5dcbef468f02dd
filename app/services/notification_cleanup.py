# app/services/notification_cleanup.py
import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.crud import notification as crud_notification
from app.dependencies import get_db_context

logger = logging.getLogger(__name__)


def archive_old_notifications(db: Session) -> int:
    """Removes read notifications after 30 days and every notification after 90 (configurable)."""
    removed = crud_notification.smart_delete_old_notifications(
        db,
        read_older_than_days=settings.DELETE_READ_NOTIFICATIONS_AFTER_DAYS,
        any_older_than_days=settings.DELETE_ANY_NOTIFICATION_AFTER_DAYS,
    )
    logger.info(f"Notification archive removed {removed} rows.")
    return removed


def cleanup_old_notifications_task() -> int:
    """Nightly scheduler entry point. Failures are logged so the scheduler keeps running."""
    with get_db_context() as db:
        try:
            return archive_old_notifications(db)
        except Exception:
            logger.error("Notification archive job failed", exc_info=True)
            db.rollback()
            return 0
