from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from cafeorders.domain.common.ids import OrderId, TableNumber
from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import OrderStatus


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    order_number: str
    table_number: TableNumber
    total: Money
    created_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    order_number: str
    from_status: OrderStatus
    to_status: OrderStatus
    occurred_at: datetime
