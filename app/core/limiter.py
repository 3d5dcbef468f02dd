# app/core/limiter.py

import logging
from typing import Optional

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings
from app.models.client import Client

logger = logging.getLogger(__name__)

# --- Request identity for rate limiting ---

def key_func(request: Request) -> str:
    """
    Identifies the caller a limit applies to.
    Priority: authenticated client ID -> remote IP address.
    """
    # get_current_user stores the client on request.state
    client: Optional[Client] = getattr(request.state, "user", None)

    if client is not None and client.id:
        return f"client:{client.id}"

    return get_remote_address(request)

# Counters live in Redis in production; tests point RATE_LIMIT_STORAGE_URI at memory://
limiter = Limiter(
    key_func=key_func,
    storage_uri=settings.LIMITER_STORAGE_URI,
    strategy="moving-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
