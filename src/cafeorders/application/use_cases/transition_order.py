from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from cafeorders.application.dto.responses import OrderResponse
from cafeorders.application.mappers.event_envelope import TraceContext, serialize_order_event
from cafeorders.application.mappers.order_mapper import to_order_response
from cafeorders.application.metrics.order_lifecycle import (
    record_order_status,
    record_time_to_complete,
    record_transition,
    record_transition_rejected,
)
from cafeorders.application.ports.publisher import EventPublisher
from cafeorders.application.ports.repositories import OrderRepository, StatusConflictError
from cafeorders.application.use_cases.get_order import OrderNotFoundError
from cafeorders.application.use_cases.publishing import publish_order_event
from cafeorders.domain.common.ids import OrderId
from cafeorders.domain.order.entities import (
    ORDER_TRANSITIONS,
    Order,
    OrderAction,
    OrderStatus,
    OrderTransitionError,
)
from cafeorders.domain.order.events import OrderStatusChanged

logger = logging.getLogger(__name__)

# conditional updates that lose a race are re-evaluated against the winner's status
_MAX_ATTEMPTS = 3


class InvalidTransitionError(Exception):
    def __init__(self, order_id: OrderId, current: OrderStatus, requested: OrderStatus) -> None:
        self.current = current
        self.requested = requested
        self.details = {
            "orderId": str(order_id),
            "currentStatus": current.value,
            "requestedStatus": requested.value,
        }
        super().__init__(
            f"cannot move order {order_id} from status={current.value} to status={requested.value}"
        )


class OrderConflictError(Exception):
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TransitionOrder:
    """Applies one lifecycle action to an order.

    The write is conditional on the status the decision was made from, so
    two staff members acting on the same order at the same time cannot both
    win. Repeating an action is rejected like any other illegal transition.
    """

    action: OrderAction

    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._clock = clock

    def execute(self, order_id: OrderId, trace_ctx: TraceContext) -> OrderResponse:
        _, target = ORDER_TRANSITIONS[self.action]
        for _attempt in range(_MAX_ATTEMPTS):
            order = self._order_repository.get(order_id)
            if order is None:
                raise OrderNotFoundError(f"order {order_id} not found")

            now = self._clock()
            try:
                updated = order.apply(self.action, now)
            except OrderTransitionError as exc:
                record_transition_rejected(current=exc.current, requested=exc.requested)
                raise InvalidTransitionError(
                    order_id=order_id,
                    current=exc.current,
                    requested=exc.requested,
                ) from exc

            try:
                self._order_repository.update_status(updated, expected_status=order.status)
            except StatusConflictError:
                logger.info(
                    "order_transition_conflict",
                    extra={"order_id": str(order_id), "to_status": target.value},
                )
                continue

            self._after_transition(order.status, updated, now, trace_ctx)
            return to_order_response(updated)

        raise OrderConflictError(f"order {order_id} kept changing while moving to {target.value}")

    def _after_transition(
        self,
        previous: OrderStatus,
        updated: Order,
        now: datetime,
        trace_ctx: TraceContext,
    ) -> None:
        event = OrderStatusChanged(
            order_id=updated.order_id,
            order_number=updated.order_number,
            from_status=previous,
            to_status=updated.status,
            occurred_at=now,
        )
        record_transition(from_status=event.from_status, to_status=event.to_status)
        record_order_status(updated)
        if event.to_status == OrderStatus.COMPLETED:
            record_time_to_complete(updated, now=now)
        logger.info(
            "order_transitioned",
            extra={
                "order_id": str(event.order_id),
                "order_number": event.order_number,
                "from_status": event.from_status.value,
                "to_status": event.to_status.value,
            },
        )
        publish_order_event(
            self._publisher,
            serialize_order_event(
                event_type="order.status_changed",
                occurred_at=event.occurred_at,
                order=updated,
                trace_ctx=trace_ctx,
                previous_status=event.from_status.value,
            ),
        )


class StartPreparingOrder(TransitionOrder):
    action = OrderAction.START_PREPARING


class MarkOrderCompleted(TransitionOrder):
    action = OrderAction.MARK_COMPLETED


class MarkOrderPaid(TransitionOrder):
    action = OrderAction.MARK_PAID


class CancelOrder(TransitionOrder):
    action = OrderAction.CANCEL
