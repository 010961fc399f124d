from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone, tzinfo
from uuid import uuid4

from cafeorders.application.dto.requests import PlaceOrderRequest
from cafeorders.application.dto.responses import OrderResponse
from cafeorders.application.mappers.event_envelope import TraceContext, serialize_order_event
from cafeorders.application.mappers.order_mapper import to_order_response
from cafeorders.application.metrics.order_lifecycle import record_order_status
from cafeorders.application.ports.publisher import EventPublisher
from cafeorders.application.ports.repositories import (
    CatalogSnapshotProvider,
    OrderRepository,
    RequestedLine,
    TableRegistry,
)
from cafeorders.application.services.business_day import business_day
from cafeorders.application.services.offer_ledger import OfferApplication, OfferLedger
from cafeorders.application.services.sequence_allocator import SequenceAllocator
from cafeorders.application.use_cases.publishing import publish_order_event
from cafeorders.domain.common.ids import MenuItemId, OfferId, OrderId, TableNumber
from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import (
    Customer,
    OrderLine,
    create_pending_order,
    normalize_phone,
)
from cafeorders.domain.order.events import OrderPlaced

logger = logging.getLogger(__name__)


class OrderValidationError(Exception):
    pass


class TableInactiveError(Exception):
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PlaceOrder:
    """Turns a customer's cart into a numbered ``pending`` order.

    Checks run cheapest first: request fields, then the table, then the
    catalog. Only after every precondition holds is an offer use reserved
    and an order number allocated. If anything fails after the reservation,
    the reservation is released before the error propagates.
    """

    def __init__(
        self,
        table_registry: TableRegistry,
        catalog: CatalogSnapshotProvider,
        order_repository: OrderRepository,
        offer_ledger: OfferLedger,
        sequence_allocator: SequenceAllocator,
        publisher: EventPublisher,
        business_tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._table_registry = table_registry
        self._catalog = catalog
        self._order_repository = order_repository
        self._offer_ledger = offer_ledger
        self._sequence_allocator = sequence_allocator
        self._publisher = publisher
        self._business_tz = business_tz
        self._clock = clock

    def execute(self, request_dto: PlaceOrderRequest, trace_ctx: TraceContext) -> OrderResponse:
        customer = _validated_customer(request_dto)
        if not request_dto.items:
            raise OrderValidationError("cart must contain at least one item")
        for item in request_dto.items:
            if item.quantity < 1:
                raise OrderValidationError(
                    f"quantity for menu item {item.menu_item_id} must be >= 1"
                )

        table_number = TableNumber(request_dto.table_number)
        if not self._table_registry.is_table_active(table_number):
            raise TableInactiveError(f"table {table_number} is inactive or does not exist")

        lines = self._catalog.price_lines(
            [
                RequestedLine(
                    item_id=MenuItemId(item.menu_item_id),
                    quantity=item.quantity,
                    special_instructions=item.special_instructions,
                )
                for item in request_dto.items
            ]
        )
        subtotal = Money(
            amount_cents=sum(line.line_total.amount_cents for line in lines),
            currency=lines[0].unit_price.currency,
        )

        now = self._clock()
        application = self._apply_offer(request_dto, subtotal=subtotal, now=now, lines=lines)
        try:
            allocated = self._sequence_allocator.next_number(business_day(now, self._business_tz))
            order = create_pending_order(
                order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
                order_number=allocated.order_number,
                token=allocated.sequence,
                table_number=table_number,
                customer=customer,
                lines=lines,
                discount=application.discount if application.applied else None,
                now=now,
                offer_id=application.offer_id if application.applied else None,
                offer_code=application.offer_code if application.applied else None,
                notes=request_dto.notes,
            )
            self._order_repository.add(order)
        except Exception:
            self._offer_ledger.release(application)
            raise

        event = OrderPlaced(
            order_id=order.order_id,
            order_number=order.order_number,
            table_number=order.table_number,
            total=order.total,
            created_at=order.created_at,
        )
        record_order_status(order)
        logger.info(
            "order_placed",
            extra={
                "order_id": str(event.order_id),
                "order_number": event.order_number,
                "table_number": int(event.table_number),
                "total_cents": event.total.amount_cents,
                "offer_id": str(order.offer_id) if order.offer_id else None,
            },
        )
        publish_order_event(
            self._publisher,
            serialize_order_event(
                event_type="order.placed",
                occurred_at=event.created_at,
                order=order,
                trace_ctx=trace_ctx,
            ),
        )
        return to_order_response(order)

    def _apply_offer(
        self,
        request_dto: PlaceOrderRequest,
        subtotal: Money,
        now: datetime,
        lines: list[OrderLine],
    ) -> OfferApplication:
        if request_dto.offer_id:
            return self._offer_ledger.try_apply(
                OfferId(request_dto.offer_id), subtotal=subtotal, now=now, lines=lines
            )
        if request_dto.offer_code:
            return self._offer_ledger.try_apply_code(
                request_dto.offer_code, subtotal=subtotal, now=now, lines=lines
            )
        return OfferApplication(applied=False, discount=Money.zero(subtotal.currency))


def _validated_customer(request_dto: PlaceOrderRequest) -> Customer:
    try:
        return Customer(
            name=request_dto.customer_name.strip(),
            phone=normalize_phone(request_dto.customer_phone),
        )
    except ValueError as exc:
        raise OrderValidationError(str(exc)) from exc
