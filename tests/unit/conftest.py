from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cafeorders.application.ports.repositories import (
    ItemUnavailableError,
    RequestedLine,
    StatusConflictError,
    StorageUnavailableError,
)
from cafeorders.domain.common.ids import MenuItemId, OfferId, OrderId, TableNumber
from cafeorders.domain.common.money import Money
from cafeorders.domain.menu.entities import MenuItem
from cafeorders.domain.offer.entities import DiscountType, Offer
from cafeorders.domain.order.entities import (
    Customer,
    Order,
    OrderLine,
    OrderStatus,
    create_pending_order,
)
from cafeorders.domain.order.stats import DailyOrderStats, summarize_orders

NOW = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


class InMemoryOrderRepository:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._orders: dict[str, Order] = {}
        self.fail_on_add: Exception | None = None
        self.conflicts_remaining = 0

    def add(self, order: Order) -> None:
        if self.fail_on_add is not None:
            raise self.fail_on_add
        with self._lock:
            self._orders[str(order.order_id)] = order

    def get(self, order_id: OrderId) -> Order | None:
        with self._lock:
            return self._orders.get(str(order_id))

    def get_by_number(self, order_number: str) -> Order | None:
        with self._lock:
            for order in self._orders.values():
                if order.order_number == order_number:
                    return order
        return None

    def update_status(self, order: Order, expected_status: OrderStatus) -> None:
        with self._lock:
            if self.conflicts_remaining > 0:
                self.conflicts_remaining -= 1
                raise StatusConflictError(f"order {order.order_id} changed concurrently")
            current = self._orders.get(str(order.order_id))
            if current is None or current.status != expected_status:
                raise StatusConflictError(f"order {order.order_id} changed concurrently")
            self._orders[str(order.order_id)] = order

    def update_notes(
        self,
        order_id: OrderId,
        notes: str | None,
        editable_statuses: frozenset[OrderStatus],
    ) -> bool:
        with self._lock:
            current = self._orders.get(str(order_id))
            if current is None or current.status not in editable_statuses:
                return False
            self._orders[str(order_id)] = replace(current, notes=notes)
            return True

    def list_between(
        self,
        start: datetime,
        end: datetime,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        with self._lock:
            orders = [
                order
                for order in self._orders.values()
                if start <= order.created_at < end and (status is None or order.status == status)
            ]
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def list_for_table(
        self,
        table_number: TableNumber,
        customer_phone: str,
        since: datetime,
        statuses: frozenset[OrderStatus],
    ) -> list[Order]:
        with self._lock:
            orders = [
                order
                for order in self._orders.values()
                if order.table_number == table_number
                and order.customer.phone == customer_phone
                and order.created_at >= since
                and order.status in statuses
            ]
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def summarize_between(self, start: datetime, end: datetime, currency: str) -> DailyOrderStats:
        return summarize_orders(self.list_between(start, end), currency)

    def purge_history_before(self, cutoff: datetime) -> int:
        with self._lock:
            doomed = [
                key
                for key, order in self._orders.items()
                if order.status == OrderStatus.HISTORY
                and order.created_at < cutoff
            ]
            for key in doomed:
                del self._orders[key]
        return len(doomed)

    def all(self) -> list[Order]:
        with self._lock:
            return list(self._orders.values())


class InMemoryOfferRepository:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._offers: dict[str, Offer] = {}
        self.reserve_calls = 0

    def put(self, offer: Offer) -> None:
        with self._lock:
            self._offers[str(offer.offer_id)] = offer

    def get(self, offer_id: OfferId) -> Offer | None:
        with self._lock:
            return self._offers.get(str(offer_id))

    def get_by_code(self, code: str) -> Offer | None:
        with self._lock:
            for offer in self._offers.values():
                if offer.code == code:
                    return offer
        return None

    def try_reserve(self, offer_id: OfferId, now: datetime) -> bool:
        with self._lock:
            self.reserve_calls += 1
            offer = self._offers.get(str(offer_id))
            if offer is None or not offer.is_active:
                return False
            if not (offer.valid_from <= now <= offer.valid_to):
                return False
            if not offer.has_remaining_uses:
                return False
            self._offers[str(offer_id)] = replace(offer, used_count=offer.used_count + 1)
            return True

    def release(self, offer_id: OfferId) -> None:
        with self._lock:
            offer = self._offers.get(str(offer_id))
            if offer is not None and offer.used_count > 0:
                self._offers[str(offer_id)] = replace(offer, used_count=offer.used_count - 1)


class InMemorySequenceCounter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: dict[str, int] = {}
        self.unavailable = False

    def increment(self, day_key: str) -> int:
        if self.unavailable:
            raise StorageUnavailableError("counter store is down")
        with self._lock:
            value = self._values.get(day_key, 0) + 1
            self._values[day_key] = value
            return value


class FakeTableRegistry:
    def __init__(self, active: set[int]) -> None:
        self.active = active
        self.checked: list[int] = []

    def is_table_active(self, table_number: TableNumber) -> bool:
        self.checked.append(int(table_number))
        return int(table_number) in self.active


class FakeCatalog:
    def __init__(self, items: Sequence[MenuItem]) -> None:
        self._items = {str(item.item_id): item for item in items}

    def add(self, item: MenuItem) -> None:
        self._items[str(item.item_id)] = item

    def price_lines(self, requested_lines: Sequence[RequestedLine]) -> list[OrderLine]:
        lines: list[OrderLine] = []
        for requested in requested_lines:
            item = self._items.get(str(requested.item_id))
            if item is None or not item.is_available:
                raise ItemUnavailableError(f"menu item {requested.item_id} is unavailable")
            lines.append(item.snapshot(requested.quantity, requested.special_instructions))
        return lines


class FakePublisher:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []
        self.fail = False

    def publish(self, channel: str, message: str) -> None:
        if self.fail:
            raise ConnectionError("redis is down")
        self.messages.append((channel, message))


def inr(amount_cents: int) -> Money:
    return Money(amount_cents=amount_cents, currency="INR")


@pytest.fixture
def menu_items() -> list[MenuItem]:
    return [
        MenuItem(
            item_id=MenuItemId("itm_chai"),
            name="Masala Chai",
            category="beverages",
            price_money=inr(4000),
            is_available=True,
        ),
        MenuItem(
            item_id=MenuItemId("itm_sandwich"),
            name="Paneer Sandwich",
            category="snacks",
            price_money=inr(12500),
            is_available=True,
        ),
        MenuItem(
            item_id=MenuItemId("itm_brownie"),
            name="Chocolate Brownie",
            category="desserts",
            price_money=inr(11000),
            is_available=False,
        ),
    ]


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def offer_repository() -> InMemoryOfferRepository:
    return InMemoryOfferRepository()


@pytest.fixture
def sequence_counter() -> InMemorySequenceCounter:
    return InMemorySequenceCounter()


@pytest.fixture
def table_registry() -> FakeTableRegistry:
    return FakeTableRegistry(active={1, 2, 3})


@pytest.fixture
def catalog(menu_items: list[MenuItem]) -> FakeCatalog:
    return FakeCatalog(menu_items)


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def make_offer() -> Callable[..., Offer]:
    def _make(**overrides: object) -> Offer:
        fields: dict[str, object] = {
            "offer_id": OfferId("off_001"),
            "title": "10% off",
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": Decimal("10"),
            "minimum_order": inr(0),
            "max_discount": None,
            "code": "WELCOME10",
            "valid_from": NOW - timedelta(days=1),
            "valid_to": NOW + timedelta(days=1),
            "is_active": True,
            "usage_limit": None,
            "used_count": 0,
        }
        fields.update(overrides)
        return Offer(**fields)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def make_order() -> Callable[..., Order]:
    counter = iter(range(1, 10_000))

    def _make(
        unit_price_cents: int = 10000,
        quantity: int = 1,
        discount_cents: int = 0,
        table_number: int = 1,
        phone: str = "9876543210",
        created_at: datetime = NOW,
    ) -> Order:
        sequence = next(counter)
        line = OrderLine(
            item_id=MenuItemId("itm_chai"),
            name="Masala Chai",
            category="beverages",
            quantity=quantity,
            unit_price=inr(unit_price_cents),
        )
        return create_pending_order(
            order_id=OrderId(f"ord_{sequence:04d}"),
            order_number=f"ORD-20250301-{sequence:04d}",
            token=sequence,
            table_number=TableNumber(table_number),
            customer=Customer(name="Asha", phone=phone),
            lines=[line],
            discount=inr(discount_cents) if discount_cents else None,
            now=created_at,
        )

    return _make


@pytest.fixture
def now() -> datetime:
    return NOW
