from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import AWAITING_PAYMENT_STATUSES, Order, OrderStatus


@dataclass(frozen=True)
class DailyOrderStats:
    total_orders: int
    pending_orders: int
    preparing_orders: int
    completed_orders: int
    paid_orders: int
    cancelled_orders: int
    total_earnings: Money
    pending_amount: Money


def summarize_orders(orders: Iterable[Order], currency: str) -> DailyOrderStats:
    """Fold a day's orders into dashboard counters.

    Cancelled orders are reported on their own and are not part of
    ``total_orders``. Earnings only count paid (``history``) orders; every
    order still awaiting payment contributes to ``pending_amount``.
    """
    counts = {status: 0 for status in OrderStatus}
    earnings = 0
    pending_amount = 0
    for order in orders:
        counts[order.status] += 1
        if order.status == OrderStatus.HISTORY:
            earnings += order.total.amount_cents
        elif order.status in AWAITING_PAYMENT_STATUSES:
            pending_amount += order.total.amount_cents

    return DailyOrderStats(
        total_orders=sum(counts.values()) - counts[OrderStatus.CANCELLED],
        pending_orders=counts[OrderStatus.PENDING],
        preparing_orders=counts[OrderStatus.PREPARING],
        completed_orders=counts[OrderStatus.COMPLETED],
        paid_orders=counts[OrderStatus.HISTORY],
        cancelled_orders=counts[OrderStatus.CANCELLED],
        total_earnings=Money(amount_cents=earnings, currency=currency),
        pending_amount=Money(amount_cents=pending_amount, currency=currency),
    )
