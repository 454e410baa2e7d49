"""In-memory TTL store for JSON responses of GET routes.

Entries are keyed by request path plus raw query string and expire after a
per-route TTL. Mutating routes evict whole route families with
``invalidate(prefix)``; a periodic ``sweep`` reclaims expired entries that are
never requested again.

A read that started before an invalidation may finish after it. Writers pass
the ``generation`` they observed to ``set`` so such a pre-mutation payload is
dropped instead of being served for a full TTL.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A stored response.

    Attributes:
        key: Request path plus raw query string.
        status_code: HTTP status the original response was sent with.
        payload: JSON-compatible snapshot of the body that was sent.
        expires_at: UNIX time after which the entry is stale.
    """

    key: str
    status_code: int
    payload: Any
    expires_at: float


def _snapshot(payload: Any) -> Any:
    """Return a detached JSON copy of ``payload``.

    Raises:
        TypeError, ValueError: If the payload is not JSON-serializable.
    """
    return json.loads(json.dumps(payload, allow_nan=False))


class ResponseCache:
    """Per-application response store with TTL and prefix invalidation.

    An entry is readable while ``now < expires_at``. Reads never delete; stale
    entries stay until they are overwritten, invalidated or swept.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._writes = 0
        self._invalidated = 0
        self._swept = 0
        self._generation = 0
        # prefix -> generation of its latest invalidation
        self._invalidated_at: dict[str, int] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"ResponseCache(size={len(self._store)}, hits={self._hits}, misses={self._misses})"

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` if present and not expired."""
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None or now >= entry.expires_at:
                self._misses += 1
                logger.debug(
                    "cache.miss",
                    extra={
                        "cache_key": key,
                        "reason": "not_found" if entry is None else "expired",
                    },
                )
                return None

            self._hits += 1
        logger.debug("cache.hit", extra={"cache_key": key})
        return entry

    @property
    def generation(self) -> int:
        """Counter bumped by every ``invalidate`` call.

        Read it before computing a response and pass it to ``set`` so a
        response computed before an invalidation is never stored after it.
        """
        with self._lock:
            return self._generation

    def _invalidated_since(self, key: str, generation: int) -> bool:
        return any(
            at > generation and key.startswith(prefix)
            for prefix, at in self._invalidated_at.items()
        )

    def set(
        self,
        key: str,
        status_code: int,
        payload: Any,
        ttl_seconds: float,
        *,
        since_generation: int | None = None,
    ) -> CacheEntry | None:
        """Store a response, replacing any previous entry for ``key``.

        Args:
            key: Cache key.
            status_code: HTTP status of the response.
            payload: JSON-compatible response body.
            ttl_seconds: Time-to-live from now.
            since_generation: ``generation`` observed before the response was
                computed. If a matching prefix was invalidated after that,
                the write is skipped.

        Returns:
            The stored entry, or None when the write was skipped.

        Raises:
            TypeError, ValueError: If the payload cannot be serialized as JSON.
        """
        entry = CacheEntry(
            key=key,
            status_code=status_code,
            payload=_snapshot(payload),
            expires_at=self._clock() + ttl_seconds,
        )
        with self._lock:
            if since_generation is not None and self._invalidated_since(key, since_generation):
                logger.debug("cache.write_skipped", extra={"cache_key": key, "reason": "invalidated"})
                return None
            self._store[key] = entry
            self._writes += 1
            size = len(self._store)

        logger.debug(
            "cache.set",
            extra={"cache_key": key, "size": size, "ttl_s": ttl_seconds},
        )
        return entry

    def invalidate(self, prefix: str) -> int:
        """Remove every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed (0 when nothing matched).
        """
        with self._lock:
            keys = [k for k in self._store if k.startswith(prefix)]
            for key in keys:
                del self._store[key]
            self._invalidated += len(keys)
            self._generation += 1
            self._invalidated_at[prefix] = self._generation

        logger.debug(
            "cache.invalidated",
            extra={"prefix": prefix, "removed": len(keys)},
        )
        return len(keys)

    def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, entry in self._store.items() if entry.expires_at <= now]
            for key in expired:
                del self._store[key]
            self._swept += len(expired)
            size = len(self._store)

        if expired:
            logger.debug("cache.swept", extra={"removed": len(expired), "size": size})
        return len(expired)

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._writes = 0
            self._invalidated = 0
            self._swept = 0

    def stats(self) -> dict[str, int]:
        """Return lightweight cache metrics without exposing values."""
        with self._lock:
            return {
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "writes": self._writes,
                "invalidated": self._invalidated,
                "swept": self._swept,
            }
