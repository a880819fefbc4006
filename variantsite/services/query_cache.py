"""
QueryCache - Shared read-through cache for content backend queries.

One instance is shared by every render in the process, so sibling
components asking for the same registry or variant trigger a single fetch.
Entries are keyed by query string plus canonical JSON of the parameters.

Also provides LatestRequestGuard, a generation counter used to discard
responses that were superseded by a newer request.
"""

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from ..core.config import Config

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, Optional[Dict[str, Any]]], Awaitable[Any]]


class QueryCache:
    """
    In-process TTL cache with in-flight de-duplication.

    - Fresh entries are served without touching the backend
    - Concurrent misses for the same key await one shared fetch
    - Failed fetches are never cached
    - ttl_seconds <= 0 disables storage (de-duplication still applies)
    """

    def __init__(self, ttl_seconds: Optional[float] = None):
        self.ttl_seconds = Config.CONTENT_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._store: Dict[str, Tuple[Any, float]] = {}
        self._inflight: Dict[str, "asyncio.Future[Any]"] = {}
        self.hits = 0
        self.misses = 0
        self.shared = 0

    @staticmethod
    def make_key(query: str, params: Optional[Dict[str, Any]] = None) -> str:
        return f"{query}\x00{json.dumps(params or {}, sort_keys=True, default=str)}"

    def _get_fresh(self, key: str) -> Tuple[bool, Any]:
        entry = self._store.get(key)
        if entry is None:
            return False, None
        value, expires_at = entry
        if expires_at <= time.monotonic():
            self._store.pop(key, None)
            return False, None
        return True, value

    async def get_or_fetch(
        self,
        query: str,
        params: Optional[Dict[str, Any]],
        fetcher: Fetcher,
    ) -> Any:
        """
        Return the cached result for (query, params), fetching on a miss.

        Args:
            query: Query string
            params: Query parameters
            fetcher: Coroutine function called as ``fetcher(query, params)``

        Returns:
            Query result

        Raises:
            Whatever ``fetcher`` raises; the failure is not cached
        """
        key = self.make_key(query, params)

        found, value = self._get_fresh(key)
        if found:
            self.hits += 1
            return value

        pending = self._inflight.get(key)
        if pending is not None:
            self.shared += 1
            logger.debug(f"Joining in-flight fetch for query: {query[:80]}")
            return await asyncio.shield(pending)

        self.misses += 1
        task = asyncio.ensure_future(fetcher(query, params))
        self._inflight[key] = task
        try:
            value = await asyncio.shield(task)
        finally:
            self._inflight.pop(key, None)

        if self.ttl_seconds > 0:
            self._store[key] = (value, time.monotonic() + self.ttl_seconds)
        return value

    def invalidate(self, query: Optional[str] = None) -> int:
        """
        Drop cached entries.

        Args:
            query: Only drop entries for this query string (any params)

        Returns:
            Number of entries removed
        """
        if query is None:
            removed = len(self._store)
            self._store.clear()
            return removed

        prefix = f"{query}\x00"
        keys = [k for k in self._store if k.startswith(prefix)]
        for k in keys:
            self._store.pop(k, None)
        return len(keys)

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._store),
            "hits": self.hits,
            "misses": self.misses,
            "shared": self.shared,
        }


class LatestRequestGuard:
    """
    Monotonic request ids for one component.

    Issue an id before starting async work; when the work completes, apply
    its result only if ``is_current(id)`` still holds.
    """

    def __init__(self):
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest


_query_cache: Optional[QueryCache] = None


def get_query_cache() -> QueryCache:
    """Get or create the process-wide QueryCache (singleton pattern)"""
    global _query_cache

    if _query_cache is None:
        _query_cache = QueryCache()

    return _query_cache


def reset_query_cache():
    """Reset the shared cache (useful for testing)"""
    global _query_cache
    _query_cache = None
