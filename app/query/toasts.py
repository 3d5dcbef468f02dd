# app/query/toasts.py

import logging
from dataclasses import dataclass
from typing import List, Protocol

from app.clients.portal import ApiError, NetworkError
from app.core.locales import translate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    variant: str = "default"


class Toaster(Protocol):
    def show(self, toast: Toast) -> None:
        ...


class MemoryToaster:
    """Keeps shown toasts in order. For headless use and tests."""
    def __init__(self):
        self.toasts: List[Toast] = []

    def show(self, toast: Toast) -> None:
        self.toasts.append(toast)


class LoggingToaster:
    def show(self, toast: Toast) -> None:
        log = logger.warning if toast.variant == "destructive" else logger.info
        log(f"[toast] {toast.title}: {toast.description}")


def error_toast(message_key: str, error: BaseException, language: str = "en") -> Toast:
    """Bilingual error toast. Session expiry, rate limits and lost connections get their own copy."""
    if isinstance(error, ApiError) and error.is_unauthorized:
        message_key = "TOAST_SESSION_EXPIRED"
    elif isinstance(error, ApiError) and error.is_rate_limited:
        message_key = "TOAST_RATE_LIMITED"
    elif isinstance(error, NetworkError):
        message_key = "TOAST_NETWORK_ERROR"
    return Toast(
        title=translate("TOAST_ERROR_TITLE", language),
        description=translate(message_key, language),
        variant="destructive",
    )
