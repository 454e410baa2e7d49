from __future__ import annotations

"""Application factory for the admin API.

Every piece of mutable state (response cache, rate limiter, document store)
is created here and owned by the returned app via ``app.state``. The
background sweeps are tied to the app lifespan: started on startup and
cancelled on shutdown.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from admin_api.adapters.store.base import AbstractDocumentStore
from admin_api.adapters.store.in_memory import InMemoryDocumentStore
from admin_api.api.routes import build_api_router, health_router
from admin_api.core.config import Settings, settings as default_settings
from admin_api.core.exception_handlers import setup_exception_handlers
from admin_api.core.logging import configure_logging
from admin_api.core.middleware import request_id_middleware
from admin_api.core.openapi import apply_openapi_customizations
from admin_api.core.rate_limit import build_rate_limiter
from admin_api.utils.periodic import PeriodicTask
from admin_api.utils.response_cache import ResponseCache

logger = logging.getLogger(__name__)


def build_sweepers(app: FastAPI) -> list[PeriodicTask]:
    """Create the periodic sweeps for the app's cache and limiter."""
    cfg: Settings = app.state.settings
    sweepers: list[PeriodicTask] = []
    if app.state.response_cache is not None:
        sweepers.append(
            PeriodicTask(
                "response_cache.sweep",
                cfg.cache.sweep_interval_seconds,
                app.state.response_cache.sweep,
            )
        )
    if app.state.rate_limiter is not None:
        sweepers.append(
            PeriodicTask(
                "rate_limit.sweep",
                cfg.app.rate_limit_sweep_interval_seconds,
                app.state.rate_limiter.sweep,
            )
        )
    return sweepers


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    sweepers = build_sweepers(app)
    app.state.sweepers = sweepers
    for sweeper in sweepers:
        sweeper.start()
    logger.info("app.started", extra={"sweepers": [s.name for s in sweepers]})
    try:
        yield
    finally:
        for sweeper in sweepers:
            await sweeper.stop()
        logger.info("app.stopped")


def create_app(
    app_settings: Settings | None = None,
    *,
    store: AbstractDocumentStore | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded ones.
        store: Document store; defaults to a fresh in-memory store.
        clock: Time source shared by the response cache and rate limiter.

    Returns:
        Configured app with middleware, handlers, routers and owned state.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Back Office Admin API",
        description=(
            "Admin API for the e-commerce back office: products, orders, users, "
            "employees, expenses, tasks, notifications and contacts. GET listings "
            "are served from an in-process response cache (X-Cache: HIT/MISS) and "
            "every /api route is rate limited per client address."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.store = store if store is not None else InMemoryDocumentStore()
    app.state.response_cache = ResponseCache(clock=clock) if cfg.cache.enabled else None
    app.state.rate_limiter = (
        build_rate_limiter(cfg.app, clock=clock) if cfg.app.rate_limit_enabled else None
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(build_api_router())
    app.include_router(health_router)

    # OpenAPI customizations (security scheme, tags, exemptions)
    apply_openapi_customizations(app)

    return app
