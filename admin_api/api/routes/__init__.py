from __future__ import annotations

from fastapi import APIRouter, Depends

from admin_api.api.routes.directory import router as directory_router
from admin_api.api.routes.health import router as health_router
from admin_api.api.routes.orders import router as orders_router
from admin_api.api.routes.products import router as products_router
from admin_api.api.routes.staff import router as staff_router
from admin_api.core.auth import verify_bearer_token
from admin_api.core.rate_limit import enforce_rate_limit

API_PREFIX = "/api"


def build_api_router() -> APIRouter:
    """Group every admin route under ``/api``.

    The rate limiter runs before authentication, so unauthenticated floods
    are throttled too.
    """
    api_router = APIRouter(
        prefix=API_PREFIX,
        dependencies=[Depends(enforce_rate_limit), Depends(verify_bearer_token)],
    )
    api_router.include_router(directory_router)
    api_router.include_router(orders_router)
    api_router.include_router(products_router)
    api_router.include_router(staff_router)
    return api_router


__all__ = ["API_PREFIX", "build_api_router", "health_router"]
