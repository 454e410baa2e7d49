"""HTTP wiring for the in-process response cache.

Route handlers opt in with ``@cached(ttl_seconds)``; mutating handlers call
``invalidate_cache(request, prefix)`` after their write commits. The cache
instance is owned by the application (``app.state.response_cache``), so
several apps in one process never share entries.

Usage:
    @router.get("/orders")
    @cached(ttl_seconds=15)
    async def list_orders(request: Request) -> list[dict]:
        ...
"""

from __future__ import annotations

import functools
import inspect
import json
import logging
import math
from typing import Any, Awaitable, Callable

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from admin_api.utils.response_cache import ResponseCache

logger = logging.getLogger(__name__)

CACHE_STATUS_HEADER = "X-Cache"
FORCE_REFRESH_PARAM = "forceRefresh"

Handler = Callable[..., Awaitable[Any] | Any]


def get_response_cache(request: Request) -> ResponseCache | None:
    """Return the application's cache, or None when caching is disabled."""
    return getattr(request.app.state, "response_cache", None)


def build_cache_key(request: Request) -> str:
    """Request path plus raw query string, verbatim and case-sensitive."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def _force_refresh(request: Request) -> bool:
    return request.query_params.get(FORCE_REFRESH_PARAM) == "true"


def _cache_headers(status: str, ttl_seconds: float) -> dict[str, str]:
    return {
        CACHE_STATUS_HEADER: status,
        "Cache-Control": f"private, max-age={int(math.ceil(ttl_seconds))}",
    }


def invalidate_cache(request: Request, prefix: str) -> int:
    """Evict every cached response whose key starts with ``prefix``.

    Returns:
        Number of entries removed (0 when caching is disabled).
    """
    cache = get_response_cache(request)
    if cache is None:
        return 0
    return cache.invalidate(prefix)


async def _call_handler(func: Handler, args: tuple, kwargs: dict) -> Any:
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    return await run_in_threadpool(func, *args, **kwargs)


def cached(ttl_seconds: float) -> Callable[[Handler], Handler]:
    """Cache successful JSON results of a GET handler for ``ttl_seconds``.

    The decorated handler must declare a ``request: Request`` parameter. It
    may return a JSON-compatible value, a pydantic model, or a
    ``JSONResponse``; any other ``Response`` (CSV, files, streams) is passed
    through and never stored.

    Non-GET requests skip the cache entirely. ``forceRefresh=true`` skips the
    lookup but the fresh result is still stored under its own key. Error
    responses (status >= 400) are returned without cache headers. A result
    whose key family was invalidated while the handler ran is returned but
    not stored.

    Args:
        ttl_seconds: How long a stored response is served.

    Raises:
        ValueError: If ttl_seconds is not positive.
        TypeError: If the handler has no ``request`` parameter.
    """
    if ttl_seconds <= 0:
        raise ValueError("ttl_seconds must be > 0")

    def decorator(func: Handler) -> Handler:
        if "request" not in inspect.signature(func).parameters:
            raise TypeError(f"{func.__name__} must accept a 'request: Request' parameter")

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request: Request = kwargs["request"]
            cache = get_response_cache(request)
            if cache is None or request.method != "GET":
                return await _call_handler(func, args, kwargs)

            key = build_cache_key(request)
            generation = cache.generation
            if not _force_refresh(request):
                entry = cache.get(key)
                if entry is not None:
                    return JSONResponse(
                        content=entry.payload,
                        status_code=entry.status_code,
                        headers=_cache_headers("HIT", ttl_seconds),
                    )

            result = await _call_handler(func, args, kwargs)

            if isinstance(result, JSONResponse):
                response = result
            elif isinstance(result, Response):
                return result
            else:
                response = JSONResponse(content=jsonable_encoder(result))

            # Error responses are neither stored nor marked cacheable
            if response.status_code >= 400:
                return response

            try:
                payload = json.loads(bytes(response.body))
                cache.set(
                    key,
                    response.status_code,
                    payload,
                    ttl_seconds,
                    since_generation=generation,
                )
            except Exception:
                logger.warning(
                    "cache.write_failed",
                    extra={"cache_key": key},
                    exc_info=True,
                )

            response.headers.update(_cache_headers("MISS", ttl_seconds))
            return response

        wrapper.cache_ttl_seconds = ttl_seconds  # type: ignore[attr-defined]
        return wrapper

    return decorator
