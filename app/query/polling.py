# app/query/polling.py

import asyncio
import logging
from typing import Callable, List, Set

from app.query.client import QueryClient
from app.query.keys import UNREAD_COUNT_KEY
from app.query.retry import NO_RETRY

logger = logging.getLogger(__name__)

VisibilityListener = Callable[[bool], None]


class DocumentVisibility:
    """In-process stand-in for the page visibility state."""
    def __init__(self, visible: bool = True):
        self._visible = visible
        self._listeners: List[VisibilityListener] = []

    @property
    def is_visible(self) -> bool:
        return self._visible

    def add_listener(self, listener: VisibilityListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: VisibilityListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def set_visible(self, visible: bool):
        if visible == self._visible:
            return
        self._visible = visible
        for listener in list(self._listeners):
            listener(visible)


class UnreadCountPoller:
    """
    Refreshes the unread count every `interval` seconds while visible,
    and right away when the page becomes visible again.

    `stop()` cancels the timer and detaches the visibility listener. A poll
    already in flight is left to finish and write its result to the cache.
    """
    def __init__(
        self,
        client: QueryClient,
        visibility: DocumentVisibility,
        interval: float = 30.0,
        key: tuple = UNREAD_COUNT_KEY,
    ):
        self.client = client
        self.visibility = visibility
        self.interval = interval
        self.key = key
        self._timer_task: asyncio.Task | None = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def start(self):
        if self.running:
            return
        self._timer_task = asyncio.create_task(self._run_timer())
        self.visibility.add_listener(self._on_visibility_change)
        logger.debug(f"Unread-count poller started ({self.interval}s).")

    async def stop(self):
        self.visibility.remove_listener(self._on_visibility_change)
        task, self._timer_task = self._timer_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.debug("Unread-count poller stopped.")

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, *exc_info):
        await self.stop()

    async def poll_once(self):
        """One refresh. Failures are logged and dropped."""
        try:
            return await self.client.fetch_query(self.key, force=True, retry=NO_RETRY)
        except Exception as e:
            logger.warning(f"Unread-count poll failed: {e}")
            return None

    async def _run_timer(self):
        while True:
            await asyncio.sleep(self.interval)
            if self.visibility.is_visible:
                self._spawn_poll()

    def _on_visibility_change(self, visible: bool):
        if visible and self.running:
            self._spawn_poll()

    def _spawn_poll(self):
        task = asyncio.create_task(self.poll_once())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
