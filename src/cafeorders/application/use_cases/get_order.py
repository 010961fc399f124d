from __future__ import annotations

from cafeorders.application.dto.responses import OrderResponse
from cafeorders.application.mappers.order_mapper import to_order_response
from cafeorders.application.ports.repositories import OrderRepository
from cafeorders.domain.common.ids import OrderId


class OrderNotFoundError(Exception):
    pass


class GetOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return to_order_response(order)


class GetOrderByNumber:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_number: str) -> OrderResponse:
        order = self._order_repository.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(f"order {order_number} not found")
        return to_order_response(order)
