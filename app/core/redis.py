# app/core/redis.py
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)

# Catalog cache; string values, so responses are decoded
redis_client = redis.Redis.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT_SECONDS,
)


async def get_redis_client() -> redis.Redis:
    """FastAPI dependency. Tests override it with an in-memory fake."""
    return redis_client


async def redis_is_available() -> bool:
    try:
        return bool(await redis_client.ping())
    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return False


async def close_redis():
    await redis_client.aclose()
    logger.info("Redis connection pool closed.")
