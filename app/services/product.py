# app/services/product.py

import logging
import math
from typing import Optional

from fastapi import HTTPException, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.locales import error_detail
from app.crud import product as crud_product
from app.models.product import Product, Vendor
from app.schemas.common import PaginatedResponse
from app.schemas.product import (
    Product as ProductSchema, ProductCreate, ProductUpdate, StockAdjustment, VendorCreate, VendorUpdate,
)
from app.services import catalog as catalog_service

logger = logging.getLogger(__name__)


# --- Products ---

def get_product_or_404(db: Session, product_id: int) -> Product:
    product = crud_product.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("PRODUCT_NOT_FOUND"))
    return product


def _check_vendor(db: Session, vendor_id: Optional[int]):
    if vendor_id is not None and not crud_product.get_vendor(db, vendor_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("VENDOR_NOT_FOUND"))


def get_products_paginated(
    db: Session, page: int, size: int, category: Optional[str] = None, search: Optional[str] = None
) -> PaginatedResponse[ProductSchema]:
    skip = (page - 1) * size
    products = crud_product.get_products(db, skip=skip, limit=size, category=category, search=search)
    if search:
        # Search results are not counted separately; the page is the whole answer
        total_items = len(products)
    else:
        total_items = crud_product.count_products(db, category=category)
    total_pages = math.ceil(total_items / size) if total_items > 0 else 1
    return PaginatedResponse[ProductSchema](
        total_items=total_items, total_pages=total_pages, current_page=page, size=size, items=products
    )


def create_product(db: Session, data: ProductCreate) -> Product:
    if crud_product.get_product_by_sku(db, data.sku):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error_detail("SKU_TAKEN", sku=data.sku))
    _check_vendor(db, data.vendor_id)
    product = crud_product.create_product(db, data)
    logger.info(f"Product {product.sku} created.")
    return product


async def update_product(db: Session, redis: Redis, product_id: int, data: ProductUpdate) -> Product:
    product = get_product_or_404(db, product_id)
    _check_vendor(db, data.vendor_id)
    product = crud_product.update_product(db, product, data)
    await catalog_service.invalidate_for_product(db, redis, product.id)
    return product


async def delete_product(db: Session, redis: Redis, product_id: int):
    product = get_product_or_404(db, product_id)
    await catalog_service.invalidate_for_product(db, redis, product.id)
    crud_product.delete_product(db, product)
    logger.info(f"Product {product_id} deleted.")


async def adjust_stock(db: Session, redis: Redis, data: StockAdjustment) -> Product:
    """Stock never drops below zero."""
    product = get_product_or_404(db, data.product_id)
    product.stock_quantity = max(0, product.stock_quantity + data.quantity_change)
    db.commit()
    db.refresh(product)
    logger.info(
        f"Stock of {product.sku} adjusted by {data.quantity_change} -> {product.stock_quantity}"
        f" ({data.reason or 'no reason given'})."
    )
    await catalog_service.invalidate_for_product(db, redis, product.id)
    return product


# --- Vendors ---

def get_vendor_or_404(db: Session, vendor_id: int) -> Vendor:
    vendor = crud_product.get_vendor(db, vendor_id)
    if not vendor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("VENDOR_NOT_FOUND"))
    return vendor


def create_vendor(db: Session, data: VendorCreate) -> Vendor:
    if crud_product.get_vendor_by_number(db, data.vendor_number):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_detail("VENDOR_NUMBER_TAKEN", vendor_number=data.vendor_number),
        )
    return crud_product.create_vendor(db, data)


def update_vendor(db: Session, vendor_id: int, data: VendorUpdate) -> Vendor:
    return crud_product.update_vendor(db, get_vendor_or_404(db, vendor_id), data)


def delete_vendor(db: Session, vendor_id: int):
    crud_product.delete_vendor(db, get_vendor_or_404(db, vendor_id))
