from __future__ import annotations

from datetime import date, timezone, tzinfo

from cafeorders.application.dto.responses import (
    DailyStatsResponse,
    HistoryForDayResponse,
    OrdersResponse,
)
from cafeorders.application.mappers.order_mapper import (
    to_daily_stats_response,
    to_money_response,
    to_order_response,
)
from cafeorders.application.ports.repositories import OrderRepository
from cafeorders.application.services.business_day import day_bounds
from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import OrderStatus


class InvalidReportQueryError(Exception):
    pass


def parse_report_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidReportQueryError(f"invalid date: {value}, expected YYYY-MM-DD") from exc


def parse_status_filter(status: str | None) -> OrderStatus | None:
    if status is None or status.lower() == "all":
        return None
    try:
        return OrderStatus(status.lower())
    except ValueError as exc:
        raise InvalidReportQueryError(f"invalid order status: {status}") from exc


class GetDailyStats:
    """Counts and revenue for one business day. Read-only."""

    def __init__(
        self,
        order_repository: OrderRepository,
        currency: str,
        business_tz: tzinfo = timezone.utc,
    ) -> None:
        self._order_repository = order_repository
        self._currency = currency
        self._business_tz = business_tz

    def execute(self, day: date) -> DailyStatsResponse:
        start, end = day_bounds(day, self._business_tz)
        stats = self._order_repository.summarize_between(
            start=start,
            end=end,
            currency=self._currency,
        )
        return to_daily_stats_response(day, stats)


class ListOrdersForDay:
    def __init__(
        self,
        order_repository: OrderRepository,
        business_tz: tzinfo = timezone.utc,
    ) -> None:
        self._order_repository = order_repository
        self._business_tz = business_tz

    def execute(self, day: date, status: str | None = None) -> OrdersResponse:
        status_filter = parse_status_filter(status)
        start, end = day_bounds(day, self._business_tz)
        orders = self._order_repository.list_between(start=start, end=end, status=status_filter)
        return OrdersResponse(orders=[to_order_response(order) for order in orders])


class GetHistoryForDay:
    def __init__(
        self,
        order_repository: OrderRepository,
        currency: str,
        business_tz: tzinfo = timezone.utc,
    ) -> None:
        self._order_repository = order_repository
        self._currency = currency
        self._business_tz = business_tz

    def execute(self, day: date) -> HistoryForDayResponse:
        start, end = day_bounds(day, self._business_tz)
        orders = self._order_repository.list_between(
            start=start,
            end=end,
            status=OrderStatus.HISTORY,
        )
        earnings = Money(
            amount_cents=sum(order.total.amount_cents for order in orders),
            currency=self._currency,
        )
        return HistoryForDayResponse(
            date=day,
            orders=[to_order_response(order) for order in orders],
            totalOrders=len(orders),
            totalEarnings=to_money_response(earnings),
        )
