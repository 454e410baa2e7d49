"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from admin_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping the raw arrival timestamps of each client.

    A request is admitted when fewer than ``limit`` earlier requests from the
    same key arrived within the last ``window_seconds``. Rejected attempts
    are not recorded, so a throttled client regains budget as soon as its
    oldest counted request leaves the window.

    Timestamps are purged on every ``consume`` for that key; ``sweep`` purges
    all keys with the longer ``retention_seconds`` horizon and forgets keys
    that end up empty.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        retention_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of requests per window.
            window_seconds: Size of the sliding window in seconds.
            retention_seconds: Horizon used by ``sweep``; defaults to
                ``window_seconds``.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit, window_seconds or retention_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if retention_seconds is None:
            retention_seconds = window_seconds
        if retention_seconds < window_seconds:
            raise ValueError("retention_seconds must be >= window_seconds")

        self._limit = limit
        self._window_seconds = window_seconds
        self._retention_seconds = retention_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._timestamps_by_key: dict[str, list[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._timestamps_by_key)

    def _purge(self, key: str, cutoff: float) -> list[float]:
        """Keep only timestamps newer than ``cutoff``; forget the key if none remain."""
        timestamps = [t for t in self._timestamps_by_key.get(key, ()) if t > cutoff]
        if timestamps:
            self._timestamps_by_key[key] = timestamps
        else:
            self._timestamps_by_key.pop(key, None)
        return timestamps

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Check the key's window and record the request when admitted.

        Args:
            key: Client identity.
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult with the admission decision and metadata.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            timestamps = self._purge(key, now - self._window_seconds)

            if len(timestamps) + cost > self._limit:
                reset_at = timestamps[0] + self._window_seconds if timestamps else now
                retry_after = max(0, int(math.ceil(reset_at - now)))
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=max(0, self._limit - len(timestamps)),
                    reset_at=int(math.ceil(reset_at)),
                    retry_after_seconds=retry_after,
                )

            timestamps.extend([now] * cost)
            self._timestamps_by_key[key] = timestamps
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - len(timestamps),
                reset_at=int(math.ceil(timestamps[0] + self._window_seconds)),
                retry_after_seconds=None,
            )

    def sweep(self) -> int:
        """Purge stale timestamps of every key and drop keys left empty."""
        cutoff = self._clock() - self._retention_seconds
        with self._lock:
            before = len(self._timestamps_by_key)
            for key in list(self._timestamps_by_key):
                self._purge(key, cutoff)
            removed = before - len(self._timestamps_by_key)

        if removed:
            logger.debug(
                "rate_limit.swept",
                extra={"removed_clients": removed, "tracked_clients": len(self)},
            )
        return removed
