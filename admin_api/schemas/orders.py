"""Pydantic schemas for order administration."""

from typing import Literal

from pydantic import BaseModel, Field

OrderStatus = Literal["processing", "shipped", "delivered", "cancelled"]

ORDER_STATUSES: tuple[str, ...] = ("processing", "shipped", "delivered", "cancelled")


class OrderStatusUpdate(BaseModel):
    """Body of ``PUT /api/orders/admin/{id}/status``.

    The value is checked by the order service so that unknown statuses get
    the same error body as other business-rule failures.
    """

    status: str | None = Field(
        None,
        description="New order status: processing, shipped, delivered or cancelled.",
    )


class OrderStatusSummary(BaseModel):
    """Fields echoed back after a status change."""

    id: str = Field(..., alias="_id")
    orderStatus: OrderStatus
    paymentStatus: str | None = None
    updatedAt: str | None = None

    model_config = {"populate_by_name": True}


class OrderStatusUpdateResponse(BaseModel):
    success: bool = True
    message: str
    order: OrderStatusSummary


class OrderNoteCreate(BaseModel):
    """Body of ``POST /api/orders/{id}/notes``; blank notes are rejected by the service."""

    note: str | None = Field(None, description="Internal note appended to the order.")
