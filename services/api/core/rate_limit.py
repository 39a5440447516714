"""
Fixed-window rate limiting.

Counters live in a RateStore that is owned outside the limiter, so the same
limits hold whether the API runs as one process or several instances:
- TTLCacheRateStore keeps counters in-process (single instance, tests)
- ContentStoreRateStore keeps them in the content store's rateLimits collection

Each store holds one counter per `scope:client`, tagged with the start of the
window it counts; a hit in a newer window resets it.
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Tuple

from cachetools import TTLCache
from fastapi import Request

from adapters.base import RATE_LIMITS

logger = logging.getLogger(__name__)


class RateStore(Protocol):
    def incr(self, key: str, window_start: int, ttl_seconds: int) -> int:
        """Count one hit for `key` in the window starting at `window_start` and return the total."""
        ...


class TTLCacheRateStore:
    """In-process counters that expire after the longest window we use (24h)."""

    def __init__(self, maxsize: int = 10_000, ttl_seconds: int = 24 * 60 * 60) -> None:
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def incr(self, key: str, window_start: int, ttl_seconds: int) -> int:
        with self._lock:
            start, count = self._cache.get(key, (window_start, 0))
            count = count + 1 if start == window_start else 1
            self._cache[key] = (window_start, count)
            return count


class ContentStoreRateStore:
    """
    Counters as documents in the content store, one per `scope:client`.

    The document is reused across windows, so the collection stays as large as
    the set of clients seen. The read-then-write is not transactional; two
    requests racing on the same window may both be counted once.
    """

    def __init__(self, storage) -> None:
        self.storage = storage

    def incr(self, key: str, window_start: int, ttl_seconds: int) -> int:
        expires_at = datetime.fromtimestamp(window_start + ttl_seconds, tz=timezone.utc).isoformat()
        existing = self.storage.list_records(RATE_LIMITS, filters={"key": key})
        if existing:
            row = existing[0]
            # duplicates only appear when two first hits race
            for extra in existing[1:]:
                self.storage.delete_record(RATE_LIMITS, extra["id"])

            if row.get("windowStart") == window_start:
                count = int(row.get("count", 0)) + 1
                self.storage.update_record(RATE_LIMITS, row["id"], {"count": count})
            else:
                count = 1
                self.storage.update_record(
                    RATE_LIMITS,
                    row["id"],
                    {"count": 1, "windowStart": window_start, "expiresAt": expires_at},
                )
            return count

        self.storage.create_record(
            RATE_LIMITS,
            {"key": key, "count": 1, "windowStart": window_start, "expiresAt": expires_at},
        )
        return 1


class RateLimiter:
    """
    Allow at most `limit` hits per client per fixed window of `window_seconds`.
    """

    def __init__(
        self,
        store: RateStore,
        scope: str,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.scope = scope
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock

    def hit(self, client_id: str) -> Tuple[bool, int]:
        """
        Record one hit.
        Returns: (is_allowed, retry_after_seconds)
        """
        now = self.clock()
        window_start = int(now // self.window_seconds) * self.window_seconds
        key = f"{self.scope}:{client_id}"
        count = self.store.incr(key, window_start, self.window_seconds)

        if count > self.limit:
            retry_after = max(1, int(window_start + self.window_seconds - now))
            logger.warning(f"Rate limit exceeded for {client_id} on {self.scope} ({count}/{self.limit})")
            return False, retry_after
        return True, 0


def client_ip(request: Request, trusted_hops: int = 1) -> str:
    """
    Client address as seen by the outermost trusted proxy.

    Each proxy appends the peer it saw to X-Forwarded-For, so only the last
    `trusted_hops` entries were written by our own infrastructure; anything to
    their left is whatever the client sent. With `trusted_hops=0` the header is
    ignored and the socket peer is used.
    """
    forwarded: Optional[str] = request.headers.get("x-forwarded-for")
    if forwarded and trusted_hops > 0:
        hops = [h.strip() for h in forwarded.split(",") if h.strip()]
        if hops:
            return hops[-min(trusted_hops, len(hops))]
    return request.client.host if request.client else "unknown"
