from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import uuid4

from cafeorders.domain.order.entities import Order

ORDER_EVENTS_CHANNEL = "events:orders"


@dataclass(frozen=True)
class TraceContext:
    """Correlation ids stamped on every event raised while serving one request."""

    trace_id: str | None
    request_id: str | None


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_order_event(
    *,
    event_type: str,
    occurred_at: datetime,
    order: Order,
    trace_ctx: TraceContext,
    previous_status: str | None = None,
) -> str:
    payload: dict[str, Any] = {
        "orderId": str(order.order_id),
        "orderNumber": order.order_number,
        "token": order.token,
        "tableNumber": int(order.table_number),
        "status": order.status.value,
        "totalMoney": {
            "amountCents": order.total.amount_cents,
            "currency": order.total.currency,
        },
        "createdAt": order.created_at.isoformat(),
        "items": [
            {
                "menuItemId": str(line.item_id),
                "name": line.name,
                "quantity": line.quantity,
                "specialInstructions": line.special_instructions,
            }
            for line in order.lines
        ],
        "notes": order.notes,
    }
    if previous_status is not None:
        payload["previousStatus"] = previous_status
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
        payload=payload,
    )
