# app/crud/lta.py
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload

from app.models.lta import Lta, LtaProduct, LtaClient
from app.models.product import Product


def get_lta(db: Session, lta_id: int) -> Lta | None:
    return db.get(Lta, lta_id)


def get_ltas(db: Session, status: Optional[str] = None) -> List[Lta]:
    query = db.query(Lta)
    if status:
        query = query.filter(Lta.status == status)
    return query.order_by(Lta.created_at.desc(), Lta.id.desc()).all()


def get_client_ltas(db: Session, client_id: int, active_only: bool = True) -> List[Lta]:
    query = db.query(Lta).join(LtaClient, LtaClient.lta_id == Lta.id).filter(LtaClient.client_id == client_id)
    if active_only:
        query = query.filter(Lta.status == "active")
    return query.order_by(Lta.id).all()


def get_lta_product(db: Session, lta_id: int, product_id: int) -> LtaProduct | None:
    return db.query(LtaProduct).filter_by(lta_id=lta_id, product_id=product_id).first()


def get_lta_products(db: Session, lta_id: int) -> List[LtaProduct]:
    return (
        db.query(LtaProduct)
        .options(joinedload(LtaProduct.product))
        .filter(LtaProduct.lta_id == lta_id)
        .order_by(LtaProduct.id)
        .all()
    )


def upsert_lta_product(
    db: Session, lta_id: int, product_id: int, contract_price: Decimal, currency: str = "SAR"
) -> LtaProduct:
    """Sets the contract price of a product under an LTA. Does not commit."""
    lta_product = get_lta_product(db, lta_id, product_id)
    if lta_product:
        lta_product.contract_price = contract_price
        lta_product.currency = currency
    else:
        lta_product = LtaProduct(
            lta_id=lta_id, product_id=product_id, contract_price=contract_price, currency=currency
        )
        db.add(lta_product)
    db.flush()
    return lta_product


def delete_lta_product(db: Session, lta_product: LtaProduct):
    db.delete(lta_product)
    db.commit()


def is_client_assigned(db: Session, lta_id: int, client_id: int) -> bool:
    return db.query(LtaClient).filter_by(lta_id=lta_id, client_id=client_id).first() is not None


def get_lta_clients(db: Session, lta_id: int) -> List[LtaClient]:
    return db.query(LtaClient).filter(LtaClient.lta_id == lta_id).order_by(LtaClient.id).all()


def assign_client(db: Session, lta_id: int, client_id: int) -> LtaClient:
    """Idempotent. Does not commit."""
    link = db.query(LtaClient).filter_by(lta_id=lta_id, client_id=client_id).first()
    if link is None:
        link = LtaClient(lta_id=lta_id, client_id=client_id)
        db.add(link)
        db.flush()
    return link


def remove_client(db: Session, lta_id: int, client_id: int) -> bool:
    deleted = db.query(LtaClient).filter_by(lta_id=lta_id, client_id=client_id).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def get_client_catalog_rows(db: Session, client_id: int):
    """(Product, LtaProduct) pairs across the client's active LTAs."""
    return (
        db.query(Product, LtaProduct)
        .join(LtaProduct, LtaProduct.product_id == Product.id)
        .join(Lta, Lta.id == LtaProduct.lta_id)
        .join(LtaClient, LtaClient.lta_id == Lta.id)
        .filter(LtaClient.client_id == client_id, Lta.status == "active")
        .order_by(Product.id, LtaProduct.lta_id)
        .all()
    )


def get_lta_client_ids(db: Session, lta_id: int) -> List[int]:
    return [row.client_id for row in db.query(LtaClient.client_id).filter(LtaClient.lta_id == lta_id).all()]


def get_client_ids_for_product(db: Session, product_id: int) -> List[int]:
    rows = (
        db.query(LtaClient.client_id)
        .join(LtaProduct, LtaProduct.lta_id == LtaClient.lta_id)
        .filter(LtaProduct.product_id == product_id)
        .distinct()
        .all()
    )
    return [row.client_id for row in rows]
