from __future__ import annotations

import pytest

from cafeorders.application.dto.requests import UpdateOrderNotesRequest
from cafeorders.application.use_cases.get_order import (
    GetOrder,
    GetOrderByNumber,
    OrderNotFoundError,
)
from cafeorders.application.use_cases.update_order_notes import UpdateOrderNotes
from cafeorders.domain.common.ids import OrderId
from cafeorders.domain.order.entities import OrderNotesLockedError


def test_notes_can_change_while_order_is_open(make_order, order_repository) -> None:
    order = make_order()
    order_repository.add(order)

    response = UpdateOrderNotes(order_repository).execute(
        order.order_id, UpdateOrderNotesRequest(notes="extra napkins")
    )

    assert response.notes == "extra napkins"
    assert order_repository.get(order.order_id).notes == "extra napkins"


def test_notes_are_locked_after_payment(make_order, order_repository, now) -> None:
    order = make_order().mark_completed(now).mark_paid(now)
    order_repository.add(order)

    with pytest.raises(OrderNotesLockedError):
        UpdateOrderNotes(order_repository).execute(
            order.order_id, UpdateOrderNotesRequest(notes="late")
        )


def test_notes_for_missing_order(order_repository) -> None:
    with pytest.raises(OrderNotFoundError):
        UpdateOrderNotes(order_repository).execute(
            OrderId("ord_missing"), UpdateOrderNotesRequest(notes=None)
        )


def test_get_order_by_id_and_number(make_order, order_repository) -> None:
    order = make_order()
    order_repository.add(order)

    assert GetOrder(order_repository).execute(order.order_id).orderNumber == order.order_number
    assert GetOrderByNumber(order_repository).execute(order.order_number).orderId == order.order_id

    with pytest.raises(OrderNotFoundError):
        GetOrderByNumber(order_repository).execute("ORD-20250301-9999")
