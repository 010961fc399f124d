from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from cafeorders.domain.common.ids import MenuItemId, OfferId, OrderId, TableNumber
from cafeorders.domain.offer.entities import Offer
from cafeorders.domain.order.entities import Order, OrderLine, OrderStatus
from cafeorders.domain.order.stats import DailyOrderStats


@dataclass(frozen=True)
class RequestedLine:
    item_id: MenuItemId
    quantity: int
    special_instructions: str | None = None


class TableRegistry(Protocol):
    def is_table_active(self, table_number: TableNumber) -> bool: ...


class CatalogSnapshotProvider(Protocol):
    def price_lines(self, requested_lines: Sequence[RequestedLine]) -> list[OrderLine]: ...


class OfferRepository(Protocol):
    def get(self, offer_id: OfferId) -> Offer | None: ...

    def get_by_code(self, code: str) -> Offer | None: ...

    def try_reserve(self, offer_id: OfferId, now: datetime) -> bool: ...

    def release(self, offer_id: OfferId) -> None: ...


class SequenceCounterRepository(Protocol):
    def increment(self, day_key: str) -> int: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def get_by_number(self, order_number: str) -> Order | None: ...

    def update_status(self, order: Order, expected_status: OrderStatus) -> None: ...

    def update_notes(
        self,
        order_id: OrderId,
        notes: str | None,
        editable_statuses: frozenset[OrderStatus],
    ) -> bool: ...

    def list_between(
        self,
        start: datetime,
        end: datetime,
        status: OrderStatus | None = None,
    ) -> list[Order]: ...

    def list_for_table(
        self,
        table_number: TableNumber,
        customer_phone: str,
        since: datetime,
        statuses: frozenset[OrderStatus],
    ) -> list[Order]: ...

    def summarize_between(
        self,
        start: datetime,
        end: datetime,
        currency: str,
    ) -> DailyOrderStats: ...

    def purge_history_before(self, cutoff: datetime) -> int: ...


class ItemUnavailableError(Exception):
    pass


class StatusConflictError(Exception):
    pass


class StorageUnavailableError(Exception):
    pass
