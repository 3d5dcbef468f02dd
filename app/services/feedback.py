# app/services/feedback.py

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.locales import error_detail
from app.crud import feedback as crud_feedback
from app.crud import order as crud_order
from app.models.client import Client
from app.models.feedback import IssueReport, OrderFeedback
from app.schemas.feedback import IssueReportCreate, IssueStatus, OrderFeedbackCreate
from app.services import notification as notification_service
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def submit_order_feedback(db: Session, client: Client, data: OrderFeedbackCreate) -> OrderFeedback:
    """One feedback per delivered order of the client."""
    order = crud_order.get_order(db, data.order_id)
    if not order or order.client_id != client.id or order.status != "delivered":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("FEEDBACK_NOT_ELIGIBLE"))
    if crud_feedback.get_feedback_for_order(db, order.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error_detail("FEEDBACK_ALREADY_SUBMITTED"))

    feedback = OrderFeedback(client_id=client.id, **data.model_dump())
    db.add(feedback)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent submission for the same order
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error_detail("FEEDBACK_ALREADY_SUBMITTED"))
    db.refresh(feedback)
    logger.info(f"Feedback {feedback.id} submitted for order {order.id} (rating {feedback.rating}).")
    return feedback


def get_order_feedback(db: Session, order_id: int, actor: Client) -> OrderFeedback:
    order = crud_order.get_order(db, order_id)
    if not order or (order.client_id != actor.id and not actor.is_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("FEEDBACK_NOT_FOUND"))
    feedback = crud_feedback.get_feedback_for_order(db, order.id)
    if not feedback:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("FEEDBACK_NOT_FOUND"))
    return feedback


def list_feedback(db: Session, skip: int = 0, limit: int = 50) -> List[OrderFeedback]:
    return crud_feedback.get_all_feedback(db, skip=skip, limit=limit)


def respond_to_feedback(db: Session, feedback_id: int, response: str) -> OrderFeedback:
    feedback = crud_feedback.get_feedback(db, feedback_id)
    if not feedback:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("FEEDBACK_NOT_FOUND"))
    feedback.admin_response = response
    feedback.responded_at = utcnow()
    db.commit()
    db.refresh(feedback)
    return feedback


def submit_issue(db: Session, reporter: Client, data: IssueReportCreate) -> IssueReport:
    report = IssueReport(
        user_id=reporter.id,
        user_type="admin" if reporter.is_admin else "client",
        status="open",
        **data.model_dump(),
    )
    db.add(report)
    db.flush()
    notification_service.issue_reported(db, report, commit=False)
    db.commit()
    db.refresh(report)
    logger.info(f"Issue report {report.id} [{report.severity}] submitted by client {reporter.id}.")
    return report


def list_issues(db: Session, status_filter: Optional[str] = None, severity: Optional[str] = None) -> List[IssueReport]:
    return crud_feedback.get_issues(db, status=status_filter, severity=severity)


def update_issue_status(db: Session, issue_id: int, new_status: IssueStatus) -> IssueReport:
    report = crud_feedback.get_issue(db, issue_id)
    if not report:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("ISSUE_NOT_FOUND"))
    report.status = new_status
    if new_status == "resolved" and report.resolved_at is None:
        report.resolved_at = utcnow()
    db.commit()
    db.refresh(report)
    return report
