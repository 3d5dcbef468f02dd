# app/services/catalog.py

import json
import logging
from typing import Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.crud import lta as crud_lta
from app.models.client import Client
from app.schemas.product import CatalogProduct

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "catalog:client:{client_id}"
_catalog_adapter = TypeAdapter(List[CatalogProduct])


def _build_catalog(db: Session, client_id: int) -> List[CatalogProduct]:
    products = []
    for product, lta_product in crud_lta.get_client_catalog_rows(db, client_id):
        products.append(CatalogProduct(
            id=product.id,
            sku=product.sku,
            name_en=product.name_en,
            name_ar=product.name_ar,
            description_en=product.description_en,
            description_ar=product.description_ar,
            category=product.category,
            unit=product.unit,
            image_url=product.image_url,
            stock_quantity=product.stock_quantity,
            lta_id=lta_product.lta_id,
            contract_price=lta_product.contract_price,
            currency=lta_product.currency,
        ))
    return products


async def get_client_catalog(
    db: Session,
    redis: Redis,
    client: Client,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[CatalogProduct]:
    """
    Products of the client's active LTAs with their contract prices.
    The full list is cached in Redis per client; filters are applied afterwards.
    """
    cache_key = CATALOG_CACHE_KEY.format(client_id=client.id)
    products: List[CatalogProduct] | None = None

    # 1. Try the cache
    try:
        cached = await redis.get(cache_key)
    except RedisError as e:
        logger.warning(f"Redis unavailable while reading catalog for client {client.id}: {e}")
        cached = None
    if cached:
        try:
            products = _catalog_adapter.validate_json(cached)
        except ValidationError as e:
            logger.warning(f"Failed to validate cached catalog for client {client.id}: {e}. Rebuilding.")

    # 2. Fall back to the database and refill the cache
    if products is None:
        products = _build_catalog(db, client.id)
        try:
            await redis.set(
                cache_key,
                json.dumps(_catalog_adapter.dump_python(products, mode="json")),
                ex=settings.CATALOG_CACHE_TTL_SECONDS,
            )
        except RedisError as e:
            logger.warning(f"Redis unavailable while caching catalog for client {client.id}: {e}")

    if category:
        products = [p for p in products if p.category == category]
    if search:
        needle = search.lower()
        products = [
            p for p in products
            if needle in p.sku.lower() or needle in p.name_en.lower() or needle in p.name_ar
        ]
    return products


async def invalidate_client_catalogs(redis: Redis, client_ids: Iterable[int]):
    keys = [CATALOG_CACHE_KEY.format(client_id=client_id) for client_id in set(client_ids)]
    if not keys:
        return
    try:
        await redis.delete(*keys)
        logger.info(f"Invalidated catalog cache for {len(keys)} client(s).")
    except RedisError as e:
        logger.warning(f"Failed to invalidate catalog cache: {e}")


async def invalidate_for_lta(db: Session, redis: Redis, lta_id: int):
    await invalidate_client_catalogs(redis, crud_lta.get_lta_client_ids(db, lta_id))


async def invalidate_for_product(db: Session, redis: Redis, product_id: int):
    await invalidate_client_catalogs(redis, crud_lta.get_client_ids_for_product(db, product_id))
