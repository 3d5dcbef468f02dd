# app/main.py

import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm.exc import StaleDataError

# Configuration and core
from app.core.config import settings as config
from app.core.limiter import limiter
from app.core.locales import error_detail
from app.core.logging_config import setup_logging
from app.core.redis import close_redis, redis_is_available
from app.db.session import init_db

# FastAPI routers
from app.routers import (
    catalog,
    document as document_router,
    feedback as feedback_router,
    notification as notification_router,
    order as order_router,
    price_offer as price_offer_router,
)
from app.routers import admin as admin_router

# Background jobs
from app.services.notification_cleanup import cleanup_old_notifications_task

logger = logging.getLogger(__name__)
scheduler = AsyncIOScheduler(timezone=config.SCHEDULER_TIMEZONE)


# --- Error handlers ---
async def stale_data_handler(request: Request, exc: StaleDataError):
    """Two writers raced on a versioned row; the loser must reload."""
    logger.warning(f"Concurrent update rejected for {request.method} {request.url}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": error_detail("CONCURRENT_UPDATE")},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last resort: log with traceback and answer with a generic 500."""
    client = f"{request.client.host}:{request.client.port}" if request.client else "unknown"
    logger.critical(f"Unhandled exception for request: {request.method} {request.url} from {client}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": error_detail("INTERNAL_ERROR")},
    )


# --- Lifespan (startup and shutdown) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Application lifespan startup...")

    init_db()
    logger.info("Database tables ensured.")

    if config.SCHEDULER_ENABLED and not scheduler.running:
        scheduler.add_job(
            cleanup_old_notifications_task, 'cron', hour=3, minute=30,
            id="notification_archive", replace_existing=True,
        )
        scheduler.start()
        logger.info("Scheduler started with background jobs.")

    yield

    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler shut down.")
    await close_redis()
    logger.info("Application shut down.")


# --- FastAPI application ---
app = FastAPI(
    title="Procurement Portal API",
    description="Bilingual B2B procurement portal: LTA catalog, orders, price offers, notifications",
    version="0.1.0",
    lifespan=lifespan
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers ---
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(StaleDataError, stale_data_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
api_router = APIRouter(prefix="/api")

api_router.include_router(catalog.router, tags=["Catalog"])
api_router.include_router(order_router.router, tags=["Orders"])
api_router.include_router(price_offer_router.router, tags=["Price Offers"])
api_router.include_router(notification_router.router, tags=["Notifications"])
api_router.include_router(feedback_router.router, tags=["Feedback"])
api_router.include_router(document_router.router, tags=["Documents"])

# Admin endpoints
api_router.include_router(admin_router.router, prefix="/admin")

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    # Catalog reads fall back to the database when Redis is down
    redis_up = await redis_is_available()
    return {"status": "ok" if redis_up else "degraded", "redis": "up" if redis_up else "down"}
