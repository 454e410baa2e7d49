"""Order administration rules for the back office.

Rules:
- The new status must be one of processing, shipped, delivered, cancelled.
- Delivering a cash-on-delivery order with a pending payment completes it.
- Cancelling an order with a pending payment marks the payment failed; a
  cancelled order that was already paid is logged as a refund candidate.
- Notes must be non-empty once trimmed.
- Exported CSV cells never start with a spreadsheet formula character.

Customer notifications (email/SMS) are sent by another service.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from admin_api.core.errors import ValidationAppError
from admin_api.schemas.orders import ORDER_STATUSES

logger = logging.getLogger(__name__)

EXPORT_HEADER = ("Order ID", "User Email", "Total Price", "Order Status")
EXPORT_FIELDS = ("_id", "userEmail", "totalPrice", "orderStatus")

# Leading characters a spreadsheet would evaluate as a formula
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def validate_status(status: str | None) -> str:
    """Return ``status`` if it is an accepted order status.

    Raises:
        ValidationAppError: If the status is missing or unknown.
    """
    if not status:
        raise ValidationAppError(
            code="status_required",
            message="Status is required",
            details={"field": "status"},
        )
    if status not in ORDER_STATUSES:
        raise ValidationAppError(
            code="invalid_status",
            message="Invalid status value",
            details={"field": "status", "allowed_values": list(ORDER_STATUSES)},
        )
    return status


def status_changes(order: dict[str, Any], status: str) -> dict[str, Any]:
    """Compute the document changes for moving ``order`` to ``status``.

    Args:
        order: Stored order document.
        status: New status, already checked with ``validate_status``.

    Returns:
        Fields to update on the order document.
    """
    changes: dict[str, Any] = {"orderStatus": status}
    payment_status = order.get("paymentStatus")

    if (
        status == "delivered"
        and order.get("paymentMethod") == "cod"
        and payment_status == "pending"
    ):
        changes["paymentStatus"] = "completed"

    if status == "cancelled":
        if payment_status == "completed":
            logger.info(
                "order.refund_candidate",
                extra={"order_id": order.get("_id"), "order_reference": order.get("orderReference")},
            )
        elif payment_status == "pending":
            changes["paymentStatus"] = "failed"

    return changes


def validate_note(note: str | None) -> str:
    """Return the trimmed note.

    Raises:
        ValidationAppError: If the note is missing or blank.
    """
    trimmed = note.strip() if note else ""
    if not trimmed:
        raise ValidationAppError(
            code="note_required",
            message="Note is required and must be a non-empty string",
            details={"field": "note"},
        )
    return trimmed


def build_timeline(order: dict[str, Any], now: datetime | None = None) -> list[dict[str, Any]]:
    """Status milestones shown on the order detail page."""
    now_iso = (now or datetime.now(timezone.utc)).isoformat()
    timeline = [
        {"status": "Order Placed", "timestamp": order.get("createdAt")},
        {"status": "Processing", "timestamp": order.get("updatedAt")},
    ]
    if order.get("orderStatus") == "shipped":
        timeline.append({"status": "Shipped", "timestamp": now_iso})
    if order.get("orderStatus") == "delivered":
        timeline.append({"status": "Delivered", "timestamp": now_iso})
    return timeline


def sanitize_csv_field(value: Any) -> str:
    """Render a cell so spreadsheets show it as text, never as a formula."""
    text = "" if value is None else str(value)
    if text.startswith(FORMULA_PREFIXES):
        return f"'{text}"
    return text


def orders_to_csv(orders: Iterable[dict[str, Any]]) -> str:
    """Serialize orders to the CSV export; quoting is left to ``csv``."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for order in orders:
        writer.writerow([sanitize_csv_field(order.get(field)) for field in EXPORT_FIELDS])
    return buffer.getvalue()
