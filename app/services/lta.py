# app/services/lta.py

import logging
from typing import List

from fastapi import HTTPException, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.locales import error_detail
from app.crud import client as crud_client
from app.crud import lta as crud_lta
from app.crud import product as crud_product
from app.models.lta import Lta, LtaClient, LtaProduct
from app.schemas.lta import LtaCreate, LtaProductAssign, LtaUpdate
from app.services import catalog as catalog_service

logger = logging.getLogger(__name__)


def get_lta_or_404(db: Session, lta_id: int) -> Lta:
    lta = crud_lta.get_lta(db, lta_id)
    if not lta:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("LTA_NOT_FOUND"))
    return lta


def create_lta(db: Session, data: LtaCreate) -> Lta:
    lta = Lta(**data.model_dump())
    db.add(lta)
    db.commit()
    db.refresh(lta)
    logger.info(f"LTA {lta.id} '{lta.name_en}' created.")
    return lta


async def update_lta(db: Session, redis: Redis, lta_id: int, data: LtaUpdate) -> Lta:
    lta = get_lta_or_404(db, lta_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(lta, field, value)
    db.commit()
    db.refresh(lta)
    # Status changes move products in or out of client catalogs
    await catalog_service.invalidate_for_lta(db, redis, lta.id)
    return lta


async def delete_lta(db: Session, redis: Redis, lta_id: int):
    lta = get_lta_or_404(db, lta_id)
    client_ids = crud_lta.get_lta_client_ids(db, lta.id)
    db.delete(lta)
    db.commit()
    await catalog_service.invalidate_client_catalogs(redis, client_ids)
    logger.info(f"LTA {lta_id} deleted.")


async def assign_products(
    db: Session, redis: Redis, lta_id: int, assignments: List[LtaProductAssign]
) -> List[LtaProduct]:
    """Upserts contract prices; all assignments commit together."""
    lta = get_lta_or_404(db, lta_id)
    result = []
    try:
        for assignment in assignments:
            if not crud_product.get_product(db, assignment.product_id):
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("PRODUCT_NOT_FOUND"))
            result.append(crud_lta.upsert_lta_product(
                db, lta.id, assignment.product_id, assignment.contract_price, assignment.currency
            ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    for lta_product in result:
        db.refresh(lta_product)
    await catalog_service.invalidate_for_lta(db, redis, lta.id)
    logger.info(f"{len(result)} product price(s) set on LTA {lta.id}.")
    return result


def list_products(db: Session, lta_id: int) -> List[LtaProduct]:
    get_lta_or_404(db, lta_id)
    return crud_lta.get_lta_products(db, lta_id)


async def remove_product(db: Session, redis: Redis, lta_id: int, product_id: int):
    lta_product = crud_lta.get_lta_product(db, lta_id, product_id)
    if not lta_product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("LTA_PRODUCT_NOT_FOUND"))
    crud_lta.delete_lta_product(db, lta_product)
    await catalog_service.invalidate_for_lta(db, redis, lta_id)


async def assign_client(db: Session, redis: Redis, lta_id: int, client_id: int) -> LtaClient:
    lta = get_lta_or_404(db, lta_id)
    if not crud_client.get_client(db, client_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("CLIENT_NOT_FOUND"))
    link = crud_lta.assign_client(db, lta.id, client_id)
    db.commit()
    db.refresh(link)
    await catalog_service.invalidate_client_catalogs(redis, [client_id])
    return link


async def remove_client(db: Session, redis: Redis, lta_id: int, client_id: int):
    get_lta_or_404(db, lta_id)
    if not crud_lta.remove_client(db, lta_id, client_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("CLIENT_NOT_FOUND"))
    await catalog_service.invalidate_client_catalogs(redis, [client_id])
