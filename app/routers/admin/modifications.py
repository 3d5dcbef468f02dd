# app/routers/admin/modifications.py

from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.dependencies import get_admin_user, get_db
from app.models.client import Client
from app.schemas.order import OrderModification, OrderModificationReview
from app.services import order_modification as modification_service

router = APIRouter()


@router.get("", response_model=List[OrderModification])
def get_modification_requests(
    status: Literal["pending", "approved", "rejected"] | None = Query(default=None),
    db: Session = Depends(get_db)
):
    return modification_service.list_all(db, status_filter=status)


@router.post("/{modification_id}/review", response_model=OrderModification)
def review_modification_request(
    modification_id: int,
    review: OrderModificationReview,
    admin: Client = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """[ADMIN] Approve or reject a pending modification request."""
    return modification_service.review_modification(db, modification_id, admin, review)
