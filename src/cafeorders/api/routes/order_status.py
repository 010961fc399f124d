from __future__ import annotations

from fastapi import APIRouter

from cafeorders.api.middleware.correlation import current_trace_context
from cafeorders.application.dto.responses import OrderResponse
from cafeorders.application.use_cases.transition_order import (
    CancelOrder,
    MarkOrderCompleted,
    MarkOrderPaid,
    StartPreparingOrder,
    TransitionOrder,
)
from cafeorders.domain.common.ids import OrderId
from cafeorders.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorders.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _transition_use_case(use_case_cls: type[TransitionOrder]) -> TransitionOrder:
    return use_case_cls(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )


def _run(use_case_cls: type[TransitionOrder], order_id: str) -> OrderResponse:
    return _transition_use_case(use_case_cls).execute(
        order_id=OrderId(order_id),
        trace_ctx=current_trace_context(),
    )


@router.post("/v1/orders/{order_id}/start-preparing", response_model=OrderResponse)
def start_preparing(order_id: str) -> OrderResponse:
    return _run(StartPreparingOrder, order_id)


@router.post("/v1/orders/{order_id}/complete", response_model=OrderResponse)
def mark_completed(order_id: str) -> OrderResponse:
    return _run(MarkOrderCompleted, order_id)


@router.post("/v1/orders/{order_id}/pay", response_model=OrderResponse)
def mark_paid(order_id: str) -> OrderResponse:
    return _run(MarkOrderPaid, order_id)


@router.post("/v1/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel(order_id: str) -> OrderResponse:
    return _run(CancelOrder, order_id)
