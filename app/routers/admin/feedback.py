# app/routers/admin/feedback.py

from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.feedback import (
    FeedbackAdminResponse, IssueReport, IssueStatus, IssueStatusUpdate, OrderFeedback,
)
from app.services import feedback as feedback_service

router = APIRouter()


@router.get("/feedback", response_model=List[OrderFeedback])
def get_all_feedback(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    return feedback_service.list_feedback(db, skip=skip, limit=limit)


@router.post("/feedback/{feedback_id}/respond", response_model=OrderFeedback)
def respond_to_feedback(feedback_id: int, payload: FeedbackAdminResponse, db: Session = Depends(get_db)):
    return feedback_service.respond_to_feedback(db, feedback_id, payload.admin_response)


@router.get("/issues", response_model=List[IssueReport])
def get_issue_reports(
    status: IssueStatus | None = Query(default=None),
    severity: Literal["low", "medium", "high", "critical"] | None = Query(default=None),
    db: Session = Depends(get_db)
):
    return feedback_service.list_issues(db, status_filter=status, severity=severity)


@router.patch("/issues/{issue_id}/status", response_model=IssueReport)
def update_issue_status(issue_id: int, payload: IssueStatusUpdate, db: Session = Depends(get_db)):
    """[ADMIN] Moving to resolved stamps resolved_at."""
    return feedback_service.update_issue_status(db, issue_id, payload.status)
