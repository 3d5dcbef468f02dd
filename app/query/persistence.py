# app/query/persistence.py

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Sequence

import aiofiles

from app.query.client import QueryClient

logger = logging.getLogger(__name__)

CACHE_VERSION = "1"
MAX_AGE_SECONDS = 7 * 24 * 60 * 60
# Session-bound and admin data never goes to disk
EXCLUDED_PREFIXES = ("/api/auth/", "/api/user/profile", "/api/admin/")


def should_persist(key: Sequence[Any]) -> bool:
    path = "/".join(str(part) for part in key)
    return not any(path.startswith(prefix) for prefix in EXCLUDED_PREFIXES)


class CachePersister:
    """
    Saves the query cache as {version, timestamp, queries} JSON and restores it at startup.
    Snapshots from another version, older than max_age, or unreadable are discarded.
    """
    def __init__(
        self,
        state_dir: str | Path,
        filename: str = "query-cache.json",
        version: str = CACHE_VERSION,
        max_age: float = MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(state_dir) / filename
        self.version = version
        self.max_age = max_age
        self.clock = clock

    async def save(self, client: QueryClient) -> int:
        queries = [entry for entry in client.dehydrate() if should_persist(entry["key"])]
        snapshot = {"version": self.version, "timestamp": self.clock(), "queries": queries}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(snapshot, ensure_ascii=False))
        os.replace(tmp_path, self.path)
        logger.debug(f"Persisted {len(queries)} queries to {self.path}.")
        return len(queries)

    async def restore(self, client: QueryClient) -> int:
        """Returns the number of queries put back into the cache."""
        if not self.path.exists():
            return 0
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                snapshot = json.loads(await f.read())
            version = snapshot["version"]
            timestamp = float(snapshot["timestamp"])
            queries = list(snapshot["queries"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Corrupt query cache at {self.path}, removing it: {e}")
            await self.clear()
            return 0

        if version != self.version:
            logger.info(f"Discarding query cache from version {version!r} (current {self.version!r}).")
            await self.clear()
            return 0
        if self.clock() - timestamp > self.max_age:
            logger.info("Discarding query cache older than the maximum age.")
            await self.clear()
            return 0

        restorable = [entry for entry in queries if should_persist(entry["key"])]
        count = client.hydrate(restorable)
        logger.info(f"Restored {count} queries from {self.path}.")
        return count

    async def clear(self):
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
