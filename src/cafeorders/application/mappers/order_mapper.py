from __future__ import annotations

from datetime import date

from cafeorders.application.dto.responses import (
    DailyStatsResponse,
    MoneyResponse,
    OrderLineResponse,
    OrderResponse,
)
from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import Order
from cafeorders.domain.order.stats import DailyOrderStats


def to_money_response(money: Money) -> MoneyResponse:
    return MoneyResponse(amountCents=money.amount_cents, currency=money.currency)


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        orderNumber=order.order_number,
        token=order.token,
        tableNumber=int(order.table_number),
        customerName=order.customer.name,
        customerPhone=order.customer.phone,
        status=order.status.value,
        items=[
            OrderLineResponse(
                menuItemId=str(line.item_id),
                name=line.name,
                category=line.category,
                quantity=line.quantity,
                unitPrice=to_money_response(line.unit_price),
                lineTotal=to_money_response(line.line_total),
                specialInstructions=line.special_instructions,
            )
            for line in order.lines
        ],
        itemCount=order.item_count,
        subtotal=to_money_response(order.subtotal),
        discount=to_money_response(order.discount),
        total=to_money_response(order.total),
        offerId=str(order.offer_id) if order.offer_id else None,
        offerCode=order.offer_code,
        notes=order.notes,
        createdAt=order.created_at,
        preparingAt=order.preparing_at,
        completedAt=order.completed_at,
        paidAt=order.paid_at,
        cancelledAt=order.cancelled_at,
    )


def to_daily_stats_response(day: date, stats: DailyOrderStats) -> DailyStatsResponse:
    return DailyStatsResponse(
        date=day,
        totalOrders=stats.total_orders,
        pendingOrders=stats.pending_orders,
        preparingOrders=stats.preparing_orders,
        completedOrders=stats.completed_orders,
        paidOrders=stats.paid_orders,
        cancelledOrders=stats.cancelled_orders,
        totalEarnings=to_money_response(stats.total_earnings),
        pendingAmount=to_money_response(stats.pending_amount),
    )
