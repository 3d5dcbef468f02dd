# app/crud/order.py
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.order import Order, OrderHistory, OrderModification


def get_order(db: Session, order_id: int) -> Order | None:
    return db.get(Order, order_id)


def get_orders(
    db: Session,
    client_id: Optional[int] = None,
    status: Optional[str] = None,
    skip: int = 0,
    limit: int = 20,
) -> List[Order]:
    query = db.query(Order)
    if client_id is not None:
        query = query.filter(Order.client_id == client_id)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()


def count_orders(db: Session, client_id: Optional[int] = None, status: Optional[str] = None) -> int:
    query = db.query(Order)
    if client_id is not None:
        query = query.filter(Order.client_id == client_id)
    if status:
        query = query.filter(Order.status == status)
    return query.count()


def add_history(
    db: Session,
    order: Order,
    status: str,
    previous_status: str | None,
    changed_by: int,
    notes: str | None = None,
    is_admin_note: bool = False,
) -> OrderHistory:
    """Appends one row to the order's audit trail. Does not commit."""
    entry = OrderHistory(
        order_id=order.id,
        status=status,
        previous_status=previous_status,
        changed_by=changed_by,
        notes=notes,
        is_admin_note=is_admin_note,
    )
    db.add(entry)
    return entry


def get_history(db: Session, order_id: int, include_admin_notes: bool) -> List[OrderHistory]:
    query = db.query(OrderHistory).filter(OrderHistory.order_id == order_id)
    if not include_admin_notes:
        query = query.filter(OrderHistory.is_admin_note == False)
    return query.order_by(OrderHistory.changed_at.asc(), OrderHistory.id.asc()).all()


# --- Modifications ---

def get_modification(db: Session, modification_id: int) -> OrderModification | None:
    return db.get(OrderModification, modification_id)


def get_pending_modification(db: Session, order_id: int) -> OrderModification | None:
    return db.query(OrderModification).filter_by(order_id=order_id, status="pending").first()


def get_order_modifications(db: Session, order_id: int) -> List[OrderModification]:
    return (
        db.query(OrderModification)
        .filter(OrderModification.order_id == order_id)
        .order_by(OrderModification.created_at.desc(), OrderModification.id.desc())
        .all()
    )


def get_modifications(db: Session, status: Optional[str] = None) -> List[OrderModification]:
    query = db.query(OrderModification)
    if status:
        query = query.filter(OrderModification.status == status)
    return query.order_by(OrderModification.created_at.desc(), OrderModification.id.desc()).all()
