from __future__ import annotations

from fastapi import APIRouter, Query, status

from cafeorders.api.middleware.correlation import current_trace_context
from cafeorders.api.routes.reports import report_day
from cafeorders.application.dto.requests import PlaceOrderRequest, UpdateOrderNotesRequest
from cafeorders.application.dto.responses import OrderResponse, OrdersResponse
from cafeorders.application.services.offer_ledger import OfferLedger
from cafeorders.application.services.sequence_allocator import SequenceAllocator
from cafeorders.application.use_cases.daily_reports import ListOrdersForDay
from cafeorders.application.use_cases.get_order import GetOrder, GetOrderByNumber
from cafeorders.application.use_cases.place_order import PlaceOrder
from cafeorders.application.use_cases.update_order_notes import UpdateOrderNotes
from cafeorders.domain.common.ids import OrderId
from cafeorders.infrastructure.db.repositories.menu_repo import SqlAlchemyCatalogSnapshotProvider
from cafeorders.infrastructure.db.repositories.offer_repo import SqlAlchemyOfferRepository
from cafeorders.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorders.infrastructure.db.repositories.sequence_repo import (
    SqlAlchemySequenceCounterRepository,
)
from cafeorders.infrastructure.db.repositories.table_repo import SqlAlchemyTableRegistry
from cafeorders.infrastructure.messaging.redis_publisher import RedisEventPublisher
from cafeorders.infrastructure.settings import business_timezone

router = APIRouter()


def _place_order_use_case() -> PlaceOrder:
    return PlaceOrder(
        table_registry=SqlAlchemyTableRegistry(),
        catalog=SqlAlchemyCatalogSnapshotProvider(),
        order_repository=SqlAlchemyOrderRepository(),
        offer_ledger=OfferLedger(SqlAlchemyOfferRepository()),
        sequence_allocator=SequenceAllocator(SqlAlchemySequenceCounterRepository()),
        publisher=RedisEventPublisher(),
        business_tz=business_timezone(),
    )


def _get_order_use_case() -> GetOrder:
    return GetOrder(order_repository=SqlAlchemyOrderRepository())


def _get_order_by_number_use_case() -> GetOrderByNumber:
    return GetOrderByNumber(order_repository=SqlAlchemyOrderRepository())


def _update_notes_use_case() -> UpdateOrderNotes:
    return UpdateOrderNotes(order_repository=SqlAlchemyOrderRepository())


def _orders_for_day_use_case() -> ListOrdersForDay:
    return ListOrdersForDay(
        order_repository=SqlAlchemyOrderRepository(),
        business_tz=business_timezone(),
    )


@router.post("/v1/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(request_dto: PlaceOrderRequest) -> OrderResponse:
    return _place_order_use_case().execute(
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.get("/v1/orders", response_model=OrdersResponse)
def orders_for_day(
    day: str | None = Query(default=None, alias="date"),
    order_status: str | None = Query(default=None, alias="status"),
) -> OrdersResponse:
    return _orders_for_day_use_case().execute(day=report_day(day), status=order_status)


@router.get("/v1/orders/by-number/{order_number}", response_model=OrderResponse)
def get_order_by_number(order_number: str) -> OrderResponse:
    return _get_order_by_number_use_case().execute(order_number=order_number)


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return _get_order_use_case().execute(order_id=OrderId(order_id))


@router.patch("/v1/orders/{order_id}/notes", response_model=OrderResponse)
def update_order_notes(order_id: str, request_dto: UpdateOrderNotesRequest) -> OrderResponse:
    return _update_notes_use_case().execute(order_id=OrderId(order_id), request_dto=request_dto)
