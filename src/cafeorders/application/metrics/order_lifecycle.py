from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Histogram

from cafeorders.domain.order.entities import Order, OrderStatus

ORDERS_TOTAL = Counter(
    "cafe_orders_total",
    "Total number of orders observed by status.",
    ["status"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "cafe_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_TRANSITION_REJECTED_TOTAL = Counter(
    "cafe_order_transition_rejected_total",
    "Total number of refused order lifecycle transitions.",
    ["current", "requested"],
)

ORDER_TIME_TO_COMPLETE_SECONDS = Histogram(
    "cafe_order_time_to_complete_seconds",
    "Time between order placement and completion.",
)

OFFER_APPLICATIONS_TOTAL = Counter(
    "cafe_offer_applications_total",
    "Offer application attempts by result.",
    ["result"],
)

OFFER_RELEASES_TOTAL = Counter(
    "cafe_offer_releases_total",
    "Offer reservations released after a failed order creation.",
)

SEQUENCE_ALLOCATIONS_TOTAL = Counter(
    "cafe_sequence_allocations_total",
    "Order numbers handed out by the sequence allocator.",
)

HISTORY_PURGED_TOTAL = Counter(
    "cafe_history_orders_purged_total",
    "Archived orders deleted by housekeeping.",
)


def record_order_status(order: Order) -> None:
    ORDERS_TOTAL.labels(status=order.status.value).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_transition_rejected(current: OrderStatus, requested: OrderStatus) -> None:
    ORDER_TRANSITION_REJECTED_TOTAL.labels(current=current.value, requested=requested.value).inc()


def record_time_to_complete(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_COMPLETE_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_offer_application(result: str) -> None:
    OFFER_APPLICATIONS_TOTAL.labels(result=result).inc()


def record_offer_release() -> None:
    OFFER_RELEASES_TOTAL.inc()


def record_sequence_allocation() -> None:
    SEQUENCE_ALLOCATIONS_TOTAL.inc()


def record_history_purged(count: int) -> None:
    HISTORY_PURGED_TOTAL.inc(count)
