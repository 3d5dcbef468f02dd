# app/routers/admin/notifications.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.common import CountResult
from app.services.notification_cleanup import archive_old_notifications

router = APIRouter()


@router.post("/archive", response_model=CountResult)
def archive_notifications(db: Session = Depends(get_db)):
    """[ADMIN] Runs the nightly notification archive now."""
    return CountResult(count=archive_old_notifications(db))
