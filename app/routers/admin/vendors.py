# app/routers/admin/vendors.py

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.crud import product as crud_product
from app.dependencies import get_db
from app.schemas.product import Vendor, VendorCreate, VendorUpdate
from app.services import product as product_service

router = APIRouter()


@router.get("", response_model=List[Vendor])
def get_vendors(db: Session = Depends(get_db)):
    return crud_product.get_vendors(db)


@router.post("", response_model=Vendor, status_code=status.HTTP_201_CREATED)
def create_vendor(payload: VendorCreate, db: Session = Depends(get_db)):
    return product_service.create_vendor(db, payload)


@router.get("/{vendor_id}", response_model=Vendor)
def get_vendor(vendor_id: int, db: Session = Depends(get_db)):
    return product_service.get_vendor_or_404(db, vendor_id)


@router.patch("/{vendor_id}", response_model=Vendor)
def update_vendor(vendor_id: int, payload: VendorUpdate, db: Session = Depends(get_db)):
    return product_service.update_vendor(db, vendor_id, payload)


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vendor(vendor_id: int, db: Session = Depends(get_db)):
    product_service.delete_vendor(db, vendor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
