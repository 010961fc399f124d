from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from cafeorders.domain.common.ids import MenuItemId, OfferId, OrderId, TableNumber
from cafeorders.domain.common.money import Money

PHONE_DIGITS = 10
_PHONE_INPUT_RE = re.compile(r"^\+?[\d\s-]{10,15}$", re.ASCII)


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    COMPLETED = "completed"
    HISTORY = "history"
    CANCELLED = "cancelled"


class OrderAction(str, Enum):
    START_PREPARING = "start_preparing"
    MARK_COMPLETED = "mark_completed"
    MARK_PAID = "mark_paid"
    CANCEL = "cancel"


# action -> (allowed source states, target state)
ORDER_TRANSITIONS: dict[OrderAction, tuple[frozenset[OrderStatus], OrderStatus]] = {
    OrderAction.START_PREPARING: (
        frozenset({OrderStatus.PENDING}),
        OrderStatus.PREPARING,
    ),
    OrderAction.MARK_COMPLETED: (
        frozenset({OrderStatus.PENDING, OrderStatus.PREPARING}),
        OrderStatus.COMPLETED,
    ),
    OrderAction.MARK_PAID: (
        frozenset({OrderStatus.COMPLETED}),
        OrderStatus.HISTORY,
    ),
    OrderAction.CANCEL: (
        frozenset({OrderStatus.PENDING, OrderStatus.PREPARING}),
        OrderStatus.CANCELLED,
    ),
}

AWAITING_PAYMENT_STATUSES = frozenset(
    {OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.COMPLETED}
)
TERMINAL_STATUSES = frozenset({OrderStatus.HISTORY, OrderStatus.CANCELLED})

_TIMESTAMP_FIELDS: dict[OrderStatus, str] = {
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.COMPLETED: "completed_at",
    OrderStatus.HISTORY: "paid_at",
    OrderStatus.CANCELLED: "cancelled_at",
}

# statuses in which each transition timestamp may be present
_TIMESTAMP_ALLOWED: dict[str, frozenset[OrderStatus]] = {
    "preparing_at": frozenset(
        {
            OrderStatus.PREPARING,
            OrderStatus.COMPLETED,
            OrderStatus.HISTORY,
            OrderStatus.CANCELLED,
        }
    ),
    "completed_at": frozenset({OrderStatus.COMPLETED, OrderStatus.HISTORY}),
    "paid_at": frozenset({OrderStatus.HISTORY}),
    "cancelled_at": frozenset({OrderStatus.CANCELLED}),
}


def normalize_phone(raw: str) -> str:
    """Reduce a phone number as typed to its digits.

    Only digits, spaces, hyphens and a leading ``+`` are accepted; anything
    else raises ``ValueError`` instead of being silently dropped.
    """
    value = raw.strip()
    if not _PHONE_INPUT_RE.match(value):
        raise ValueError("customer phone may only contain digits, spaces, '-' and a leading '+'")
    return "".join(char for char in value if char.isdigit())


@dataclass(frozen=True)
class Customer:
    name: str
    phone: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("customer name must be non-empty")
        if len(self.phone) != PHONE_DIGITS or not self.phone.isdigit():
            raise ValueError(f"customer phone must be exactly {PHONE_DIGITS} digits")


@dataclass(frozen=True)
class OrderLine:
    item_id: MenuItemId
    name: str
    category: str | None
    quantity: int
    unit_price: Money
    special_instructions: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")

    @property
    def line_total(self) -> Money:
        return self.unit_price.times(self.quantity)


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    order_number: str
    token: int
    table_number: TableNumber
    customer: Customer
    status: OrderStatus
    lines: list[OrderLine]
    subtotal: Money
    discount: Money
    total: Money
    created_at: datetime
    offer_id: OfferId | None = None
    offer_code: str | None = None
    notes: str | None = None
    preparing_at: datetime | None = None
    completed_at: datetime | None = None
    paid_at: datetime | None = None
    cancelled_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("order must contain at least one line")
        currency = self.subtotal.currency
        for money in (self.discount, self.total, *(line.unit_price for line in self.lines)):
            if money.currency != currency:
                raise ValueError("order amounts must share one currency")
        expected_subtotal = sum(line.line_total.amount_cents for line in self.lines)
        if self.subtotal.amount_cents != expected_subtotal:
            raise ValueError("order subtotal must equal sum of line totals")
        if self.discount.amount_cents > self.subtotal.amount_cents:
            raise ValueError("order discount must not exceed subtotal")
        if self.total.amount_cents != self.subtotal.amount_cents - self.discount.amount_cents:
            raise ValueError("order total must equal subtotal minus discount")
        for field_name, allowed in _TIMESTAMP_ALLOWED.items():
            if getattr(self, field_name) is not None and self.status not in allowed:
                raise ValueError(f"{field_name} must not be set when status={self.status.value}")
        required = _TIMESTAMP_FIELDS.get(self.status)
        if required is not None and getattr(self, required) is None:
            raise ValueError(f"{required} must be set when status={self.status.value}")

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def apply(self, action: OrderAction, now: datetime) -> Order:
        allowed_from, target = ORDER_TRANSITIONS[action]
        if self.status not in allowed_from:
            raise OrderTransitionError(current=self.status, requested=target)
        return replace(self, status=target, **{_TIMESTAMP_FIELDS[target]: now})

    def start_preparing(self, now: datetime) -> Order:
        return self.apply(OrderAction.START_PREPARING, now)

    def mark_completed(self, now: datetime) -> Order:
        return self.apply(OrderAction.MARK_COMPLETED, now)

    def mark_paid(self, now: datetime) -> Order:
        return self.apply(OrderAction.MARK_PAID, now)

    def cancel(self, now: datetime) -> Order:
        return self.apply(OrderAction.CANCEL, now)

    def with_notes(self, notes: str | None) -> Order:
        if self.status in TERMINAL_STATUSES:
            raise OrderNotesLockedError(
                f"cannot edit notes of order {self.order_id} in status={self.status.value}"
            )
        return replace(self, notes=notes)


def create_pending_order(
    order_id: OrderId,
    order_number: str,
    token: int,
    table_number: TableNumber,
    customer: Customer,
    lines: list[OrderLine],
    discount: Money | None,
    now: datetime,
    offer_id: OfferId | None = None,
    offer_code: str | None = None,
    notes: str | None = None,
) -> Order:
    if not lines:
        raise ValueError("order must contain at least one line")

    currency = lines[0].unit_price.currency
    subtotal = Money(
        amount_cents=sum(line.line_total.amount_cents for line in lines),
        currency=currency,
    )
    discount_cents = min(discount.amount_cents, subtotal.amount_cents) if discount else 0
    return Order(
        order_id=order_id,
        order_number=order_number,
        token=token,
        table_number=table_number,
        customer=customer,
        status=OrderStatus.PENDING,
        lines=lines,
        subtotal=subtotal,
        discount=Money(amount_cents=discount_cents, currency=currency),
        total=Money(amount_cents=subtotal.amount_cents - discount_cents, currency=currency),
        created_at=now,
        offer_id=offer_id,
        offer_code=offer_code,
        notes=notes,
    )


class OrderTransitionError(Exception):
    def __init__(self, current: OrderStatus, requested: OrderStatus) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"cannot move order from status={current.value} to status={requested.value}"
        )


class OrderNotesLockedError(Exception):
    pass
