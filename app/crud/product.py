# app/crud/product.py
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.product import Product, Vendor
from app.schemas.product import ProductCreate, ProductUpdate, VendorCreate, VendorUpdate


# --- Vendors ---

def get_vendor(db: Session, vendor_id: int) -> Vendor | None:
    return db.get(Vendor, vendor_id)


def get_vendor_by_number(db: Session, vendor_number: str) -> Vendor | None:
    return db.query(Vendor).filter(Vendor.vendor_number == vendor_number).first()


def get_vendors(db: Session) -> List[Vendor]:
    return db.query(Vendor).order_by(Vendor.name_en).all()


def create_vendor(db: Session, data: VendorCreate) -> Vendor:
    vendor = Vendor(**data.model_dump())
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    return vendor


def update_vendor(db: Session, vendor: Vendor, data: VendorUpdate) -> Vendor:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(vendor, field, value)
    db.commit()
    db.refresh(vendor)
    return vendor


def delete_vendor(db: Session, vendor: Vendor):
    db.delete(vendor)
    db.commit()


# --- Products ---

def get_product(db: Session, product_id: int) -> Product | None:
    return db.get(Product, product_id)


def get_product_by_sku(db: Session, sku: str) -> Product | None:
    return db.query(Product).filter(Product.sku == sku).first()


def get_products(
    db: Session,
    skip: int = 0,
    limit: int = 50,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Product]:
    query = db.query(Product)
    if category:
        query = query.filter(Product.category == category)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            Product.sku.ilike(pattern) | Product.name_en.ilike(pattern) | Product.name_ar.ilike(pattern)
        )
    return query.order_by(Product.id).offset(skip).limit(limit).all()


def count_products(db: Session, category: Optional[str] = None) -> int:
    query = db.query(Product)
    if category:
        query = query.filter(Product.category == category)
    return query.count()


def create_product(db: Session, data: ProductCreate) -> Product:
    product = Product(**data.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product: Product, data: ProductUpdate) -> Product:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product: Product):
    db.delete(product)
    db.commit()
