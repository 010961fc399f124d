from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone, tzinfo

from cafeorders.application.dto.responses import OrdersResponse, TableVerificationResponse
from cafeorders.application.mappers.order_mapper import to_order_response
from cafeorders.application.ports.repositories import OrderRepository, TableRegistry
from cafeorders.application.services.business_day import business_day, day_bounds
from cafeorders.application.use_cases.place_order import OrderValidationError, TableInactiveError
from cafeorders.domain.common.ids import TableNumber
from cafeorders.domain.order.entities import (
    AWAITING_PAYMENT_STATUSES,
    PHONE_DIGITS,
    normalize_phone,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TableOrders:
    """Today's unpaid orders placed from one table by one phone number."""

    def __init__(
        self,
        order_repository: OrderRepository,
        business_tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repository = order_repository
        self._business_tz = business_tz
        self._clock = clock

    def execute(self, table_number: TableNumber, phone: str) -> OrdersResponse:
        try:
            customer_phone = normalize_phone(phone)
        except ValueError as exc:
            raise OrderValidationError(str(exc)) from exc
        if len(customer_phone) != PHONE_DIGITS:
            raise OrderValidationError(f"phone must be exactly {PHONE_DIGITS} digits")

        today = business_day(self._clock(), self._business_tz)
        since, _ = day_bounds(today, self._business_tz)
        orders = self._order_repository.list_for_table(
            table_number=table_number,
            customer_phone=customer_phone,
            since=since,
            statuses=AWAITING_PAYMENT_STATUSES,
        )
        return OrdersResponse(orders=[to_order_response(order) for order in orders])


class VerifyTable:
    def __init__(self, table_registry: TableRegistry) -> None:
        self._table_registry = table_registry

    def execute(self, table_number: TableNumber) -> TableVerificationResponse:
        if not self._table_registry.is_table_active(table_number):
            raise TableInactiveError(f"table {table_number} is inactive or does not exist")
        return TableVerificationResponse(tableNumber=int(table_number), isActive=True)
