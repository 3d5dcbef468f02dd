# app/routers/feedback.py

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.limiter import limiter
from app.dependencies import get_current_user, get_db
from app.models.client import Client
from app.schemas.feedback import IssueReport, IssueReportCreate, OrderFeedback, OrderFeedbackCreate
from app.services import feedback as feedback_service

router = APIRouter(prefix="/feedback")


@router.post("/order", response_model=OrderFeedback, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.FEEDBACK_RATE_LIMIT)
def submit_order_feedback(
    request: Request,
    payload: OrderFeedbackCreate,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """One feedback per delivered order; a second submission is rejected with 409."""
    return feedback_service.submit_order_feedback(db, current_user, payload)


@router.get("/order/{order_id}", response_model=OrderFeedback)
def get_order_feedback(
    order_id: int,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return feedback_service.get_order_feedback(db, order_id, current_user)


@router.post("/issue", response_model=IssueReport, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.FEEDBACK_RATE_LIMIT)
def submit_issue_report(
    request: Request,
    payload: IssueReportCreate,
    current_user: Client = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return feedback_service.submit_issue(db, current_user, payload)
