# app/routers/admin/__init__.py

from fastapi import APIRouter, Depends

from app.dependencies import get_admin_user

from . import (
    orders,
    modifications,
    price_offers,
    ltas,
    products,
    vendors,
    feedback,
    notifications,
    documents,
)

# get_admin_user guards every endpoint mounted here
router = APIRouter(
    tags=["Admin"],
    dependencies=[Depends(get_admin_user)]
)

# /admin/orders, /admin/orders/{id}/status, /admin/orders/{id}/notes
router.include_router(orders.router, prefix="/orders")

# /admin/order-modifications, /admin/order-modifications/{id}/review
router.include_router(modifications.router, prefix="/order-modifications")

router.include_router(price_offers.router, prefix="/price-offers")
router.include_router(ltas.router, prefix="/ltas")
router.include_router(products.router, prefix="/products")
router.include_router(vendors.router, prefix="/vendors")

# /admin/feedback and /admin/issues
router.include_router(feedback.router)

router.include_router(notifications.router, prefix="/notifications")
router.include_router(documents.router, prefix="/documents")
