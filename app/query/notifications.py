# app/query/notifications.py

import logging
from typing import Any, Callable, Dict, List, Optional

from app.clients.portal import ApiError, NetworkError, PortalClient
from app.query.client import QueryClient
from app.query.keys import NOTIFICATIONS_KEY, UNREAD_COUNT_KEY
from app.query.optimistic import optimistic_mutation
from app.query.retry import NO_RETRY
from app.query.toasts import LoggingToaster, Toaster, error_toast

logger = logging.getLogger(__name__)

AFFECTED_KEYS = (NOTIFICATIONS_KEY, UNREAD_COUNT_KEY)


def badge_label(count: int | None) -> str | None:
    """None for no badge, the number up to 99, then "99+"."""
    if not count or count <= 0:
        return None
    return "99+" if count > 99 else str(count)


def _items(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        return data.get("items", [])
    return data or []


def _with_items(data: Any, items: List[Dict[str, Any]]) -> Any:
    if isinstance(data, dict):
        return {**data, "items": items}
    return items


def _find(data: Any, notification_id: int) -> Dict[str, Any] | None:
    return next((n for n in _items(data) if n.get("id") == notification_id), None)


def _decrement(data: Any) -> Any:
    if data is None:
        return None
    return {**data, "count": max(0, data.get("count", 0) - 1)}


class NotificationCenter:
    """
    Notification list and unread badge on top of the query cache.
    Every change is optimistic and reconciled by refetching both keys.
    """
    def __init__(
        self,
        client: QueryClient,
        portal: PortalClient,
        toaster: Toaster | None = None,
        language: Callable[[], str] = lambda: "en",
    ):
        self.client = client
        self.portal = portal
        self.toaster = toaster or LoggingToaster()
        self.language = language

    async def fetch_notifications(self) -> Any:
        return await self.client.fetch_query(NOTIFICATIONS_KEY)

    async def fetch_unread_count(self) -> int:
        data = await self.client.fetch_query(UNREAD_COUNT_KEY)
        return (data or {}).get("count", 0)

    def cached_unread_count(self) -> int:
        data = self.client.get_query_data(UNREAD_COUNT_KEY)
        return (data or {}).get("count", 0)

    def badge(self) -> str | None:
        return badge_label(self.cached_unread_count())

    def _on_error(self, message_key: str):
        def show(error: BaseException):
            self.toaster.show(error_toast(message_key, error, self.language()))
        return show

    async def _mutate(self, apply, method: str, url: str, message_key: str):
        # Notification changes are never retried
        return await optimistic_mutation(
            self.client,
            AFFECTED_KEYS,
            apply,
            lambda: self.portal.api_request(method, url),
            on_error=self._on_error(message_key),
            retry=NO_RETRY,
        )

    async def mark_as_read(self, notification_id: int, known_unread: bool = False):
        """`known_unread` decrements the badge for a notification outside the cached page."""
        def apply(client: QueryClient):
            target = _find(client.get_query_data(NOTIFICATIONS_KEY), notification_id)
            was_unread = not target.get("is_read") if target is not None else known_unread
            client.set_query_data(NOTIFICATIONS_KEY, lambda data: None if data is None else _with_items(
                data,
                [{**n, "is_read": True} if n.get("id") == notification_id else n for n in _items(data)],
            ))
            if was_unread:
                client.set_query_data(UNREAD_COUNT_KEY, _decrement)

        return await self._mutate(
            apply, "PATCH", f"/api/client/notifications/{notification_id}/read", "TOAST_MARK_READ_FAILED"
        )

    async def delete(self, notification_id: int):
        def apply(client: QueryClient):
            target = _find(client.get_query_data(NOTIFICATIONS_KEY), notification_id)
            was_unread = target is not None and not target.get("is_read")
            client.set_query_data(NOTIFICATIONS_KEY, lambda data: None if data is None else _with_items(
                data, [n for n in _items(data) if n.get("id") != notification_id]
            ))
            if was_unread:
                client.set_query_data(UNREAD_COUNT_KEY, _decrement)

        return await self._mutate(
            apply, "DELETE", f"/api/client/notifications/{notification_id}", "TOAST_DELETE_FAILED"
        )

    async def mark_all_as_read(self):
        def apply(client: QueryClient):
            client.set_query_data(NOTIFICATIONS_KEY, lambda data: None if data is None else _with_items(
                data, [{**n, "is_read": True} for n in _items(data)]
            ))
            client.set_query_data(UNREAD_COUNT_KEY, lambda data: None if data is None else {**data, "count": 0})

        return await self._mutate(
            apply, "PATCH", "/api/client/notifications/mark-all-read", "TOAST_MARK_ALL_READ_FAILED"
        )

    async def delete_all_read(self):
        def apply(client: QueryClient):
            client.set_query_data(NOTIFICATIONS_KEY, lambda data: None if data is None else _with_items(
                data, [n for n in _items(data) if not n.get("is_read")]
            ))

        return await self._mutate(
            apply, "DELETE", "/api/client/notifications/read", "TOAST_DELETE_ALL_READ_FAILED"
        )

    async def select_action(self, notification: Dict[str, Any]) -> Optional[str]:
        """Marks the notification read (if needed) and returns where to navigate."""
        if not notification.get("is_read"):
            try:
                await self.mark_as_read(notification["id"], known_unread=True)
            except (ApiError, NetworkError) as e:
                # Already rolled back and toasted; navigation still happens
                logger.warning(f"Could not mark notification {notification['id']} as read: {e}")
        return notification.get("action_url")
