# app/schemas/product.py
from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class VendorCreate(BaseModel):
    vendor_number: str
    name_en: str
    name_ar: str
    contact_email: Optional[str] = None
    phone: Optional[str] = None


class VendorUpdate(BaseModel):
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None


class Vendor(BaseModel):
    id: int
    vendor_number: str
    name_en: str
    name_ar: str
    contact_email: str | None = None
    phone: str | None = None

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    sku: str
    name_en: str
    name_ar: str
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    category: Optional[str] = None
    unit: str = "piece"
    stock_quantity: int = 0
    vendor_id: Optional[int] = None
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    vendor_id: Optional[int] = None
    image_url: Optional[str] = None


class Product(BaseModel):
    id: int
    sku: str
    name_en: str
    name_ar: str
    description_en: str | None = None
    description_ar: str | None = None
    category: str | None = None
    unit: str
    stock_quantity: int
    vendor_id: int | None = None
    image_url: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class StockAdjustment(BaseModel):
    product_id: int
    quantity_change: int
    reason: Optional[str] = None


# Product as a client sees it through one of their LTAs
class CatalogProduct(BaseModel):
    id: int
    sku: str
    name_en: str
    name_ar: str
    description_en: str | None = None
    description_ar: str | None = None
    category: str | None = None
    unit: str
    image_url: str | None = None
    stock_quantity: int
    lta_id: int
    contract_price: Decimal
    currency: str
