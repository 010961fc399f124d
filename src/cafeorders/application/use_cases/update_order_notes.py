from __future__ import annotations

from cafeorders.application.dto.requests import UpdateOrderNotesRequest
from cafeorders.application.dto.responses import OrderResponse
from cafeorders.application.mappers.order_mapper import to_order_response
from cafeorders.application.ports.repositories import OrderRepository
from cafeorders.application.use_cases.get_order import OrderNotFoundError
from cafeorders.domain.common.ids import OrderId
from cafeorders.domain.order.entities import (
    AWAITING_PAYMENT_STATUSES,
    OrderNotesLockedError,
)


class UpdateOrderNotes:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId, request_dto: UpdateOrderNotesRequest) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        updated = order.with_notes(request_dto.notes)
        if not self._order_repository.update_notes(
            order_id=order_id,
            notes=updated.notes,
            editable_statuses=AWAITING_PAYMENT_STATUSES,
        ):
            # paid or cancelled between the read and the write
            raise OrderNotesLockedError(f"cannot edit notes of order {order_id} any more")
        return to_order_response(updated)
