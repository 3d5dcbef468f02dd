# app/crud/feedback.py
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.feedback import OrderFeedback, IssueReport


def get_feedback_for_order(db: Session, order_id: int) -> OrderFeedback | None:
    return db.query(OrderFeedback).filter(OrderFeedback.order_id == order_id).first()


def get_feedback(db: Session, feedback_id: int) -> OrderFeedback | None:
    return db.get(OrderFeedback, feedback_id)


def get_all_feedback(db: Session, skip: int = 0, limit: int = 50) -> List[OrderFeedback]:
    return (
        db.query(OrderFeedback)
        .order_by(OrderFeedback.created_at.desc(), OrderFeedback.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_issue(db: Session, issue_id: int) -> IssueReport | None:
    return db.get(IssueReport, issue_id)


def get_issues(
    db: Session, status: Optional[str] = None, severity: Optional[str] = None
) -> List[IssueReport]:
    query = db.query(IssueReport)
    if status:
        query = query.filter(IssueReport.status == status)
    if severity:
        query = query.filter(IssueReport.severity == severity)
    return query.order_by(IssueReport.created_at.desc(), IssueReport.id.desc()).all()
