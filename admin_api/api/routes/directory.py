"""Read-only listings: contact messages, customer accounts, notifications."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from admin_api.adapters.store.base import ASCENDING, DESCENDING, AbstractDocumentStore
from admin_api.api.dependencies import get_store
from admin_api.core.response_cache import cached
from admin_api.services.user_service import public_users

router = APIRouter(tags=["Directory"])

DIRECTORY_TTL_SECONDS = 30
NOTIFICATIONS_TTL_SECONDS = 15
NOTIFICATIONS_LIMIT = 20

Store = Annotated[AbstractDocumentStore, Depends(get_store)]


@router.get("/contacts")
@cached(ttl_seconds=DIRECTORY_TTL_SECONDS)
async def list_contacts(request: Request, store: Store) -> list[dict[str, Any]]:
    return await store.list("contacts")


@router.get("/users")
@cached(ttl_seconds=DIRECTORY_TTL_SECONDS)
async def list_users(
    request: Request,
    store: Store,
    include_demo: Annotated[bool, Query(alias="includeDemo")] = False,
) -> list[dict[str, Any]]:
    """List customer accounts; demo and test logins are hidden by default."""
    return public_users(await store.list("users"), include_demo=include_demo)


@router.get("/notifications")
@cached(ttl_seconds=NOTIFICATIONS_TTL_SECONDS)
async def list_notifications(request: Request, store: Store) -> list[dict[str, Any]]:
    """Latest notifications, unread first."""
    return await store.list(
        "notifications",
        sort=[("read", ASCENDING), ("createdAt", DESCENDING)],
        limit=NOTIFICATIONS_LIMIT,
    )
