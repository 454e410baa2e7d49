from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response

from admin_api.adapters.store.base import DESCENDING, AbstractDocumentStore
from admin_api.api.dependencies import get_store
from admin_api.core.errors import NotFoundAppError
from admin_api.core.response_cache import cached, invalidate_cache
from admin_api.schemas.orders import (
    OrderNoteCreate,
    OrderStatusSummary,
    OrderStatusUpdate,
    OrderStatusUpdateResponse,
)
from admin_api.services.order_service import (
    build_timeline,
    orders_to_csv,
    status_changes,
    validate_note,
    validate_status,
)

router = APIRouter(tags=["Orders"])

# Orders change often; keep reads short-lived.
ORDERS_TTL_SECONDS = 15
ORDERS_CACHE_PREFIX = "/api/orders"

Store = Annotated[AbstractDocumentStore, Depends(get_store)]


def _not_found(order_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="order_not_found",
        message="Order not found",
        details={"resource": "orders", "resource_id": order_id},
    )


@router.get("/orders")
@cached(ttl_seconds=ORDERS_TTL_SECONDS)
async def list_orders(request: Request, store: Store) -> list[dict[str, Any]]:
    """List all orders, newest first."""
    return await store.list("orders", sort=[("createdAt", DESCENDING)])


@router.get("/orders/admin/all")
@cached(ttl_seconds=ORDERS_TTL_SECONDS)
async def list_orders_admin(request: Request, store: Store) -> dict[str, Any]:
    """List all orders with a count, as used by the admin dashboard."""
    orders = await store.list("orders", sort=[("createdAt", DESCENDING)])
    return {"success": True, "count": len(orders), "orders": orders}


@router.get("/orders/export/csv")
@cached(ttl_seconds=ORDERS_TTL_SECONDS)
async def export_orders_csv(request: Request, store: Store) -> Response:
    """Download all orders as CSV. File downloads are never cached."""
    return Response(
        content=orders_to_csv(await store.list("orders")),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=orders.csv"},
    )


@router.get("/orders/{order_id}/timeline")
async def get_order_timeline(order_id: str, store: Store) -> dict[str, Any]:
    order = await store.get("orders", order_id)
    if order is None:
        raise _not_found(order_id)
    return {"success": True, "timeline": build_timeline(order)}


@router.post("/orders/{order_id}/notes")
async def add_order_note(
    order_id: str,
    body: OrderNoteCreate,
    request: Request,
    store: Store,
) -> dict[str, Any]:
    """Append an internal note and evict cached order listings.

    Raises:
        ValidationAppError: Missing or blank note (400).
        NotFoundAppError: Unknown order id (404).
    """
    note = validate_note(body.note)
    order = await store.get("orders", order_id)
    if order is None:
        raise _not_found(order_id)

    updated = await store.update("orders", order_id, {"notes": [*order.get("notes", []), note]})
    invalidate_cache(request, ORDERS_CACHE_PREFIX)
    return {"success": True, "message": "Note added successfully", "notes": updated["notes"]}


@router.put("/orders/admin/{order_id}/status", response_model=OrderStatusUpdateResponse)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    request: Request,
    store: Store,
) -> OrderStatusUpdateResponse:
    """Move an order to a new status and evict cached order listings.

    Raises:
        ValidationAppError: Missing or unknown status (400).
        NotFoundAppError: Unknown order id (404).
    """
    status = validate_status(body.status)
    order = await store.get("orders", order_id)
    if order is None:
        raise _not_found(order_id)

    updated = await store.update("orders", order_id, status_changes(order, status))
    invalidate_cache(request, ORDERS_CACHE_PREFIX)

    return OrderStatusUpdateResponse(
        message=f"Order status updated to {updated['orderStatus']}",
        order=OrderStatusSummary.model_validate(updated),
    )
