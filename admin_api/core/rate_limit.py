"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routers depend on a dependency function only.
- Swap-friendly: the limiter lives behind ``AbstractRateLimiter`` and is
  owned by the application (``app.state.rate_limiter``).
- Deterministic: a request whose peer address is unknown is counted in a
  shared ``ip:unknown`` bucket instead of failing.

Rate limiting strategy:
- Sliding window of raw request timestamps per client address.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request

from admin_api.adapters.rate_limit.base import AbstractRateLimiter
from admin_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from admin_api.core.config import AppSettings
from admin_api.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"
THROTTLED_MESSAGE = "Too many requests. Please try again later."


def build_rate_limiter(app_settings: AppSettings, *, clock=None) -> AbstractRateLimiter:
    """Create the limiter described by the application settings.

    Args:
        app_settings: Settings with the rate_limit_* values.
        clock: Optional time source (tests pass a fake clock).

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    kwargs = {"clock": clock} if clock is not None else {}
    return InMemorySlidingWindowRateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
        retention_seconds=app_settings.rate_limit_retention_seconds,
        **kwargs,
    )


def client_identity(request: Request) -> str:
    """Build the limiter key for the request from the peer address."""

    client_host = request.client.host if request.client and request.client.host else UNKNOWN_CLIENT
    return f"ip:{client_host}"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client request quota.

    When enabled, records the request in the client's window. If the client
    already made ``rate_limit_requests`` requests within the window, the
    request is rejected and not recorded.

    Raises:
        RateLimitAppError: Rendered as HTTP 429 by the exception handlers.
    """

    app_settings: AppSettings = request.app.state.settings.app
    limiter: AbstractRateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if not app_settings.rate_limit_enabled or limiter is None:
        return

    key = client_identity(request)
    key_hash = _hash_limiter_key(key)

    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": app_settings.rate_limit_window_seconds,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_s": app_settings.rate_limit_window_seconds,
            "retry_after_s": retry_after,
            "request_path": request.url.path,
        },
    )

    headers: dict[str, str] = {}
    if app_settings.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message=THROTTLED_MESSAGE,
        headers=headers,
    )
