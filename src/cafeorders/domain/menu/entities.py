from __future__ import annotations

from dataclasses import dataclass

from cafeorders.domain.common.ids import MenuItemId
from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import OrderLine


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    category: str
    price_money: Money
    is_available: bool

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")

    def snapshot(self, quantity: int, special_instructions: str | None = None) -> OrderLine:
        return OrderLine(
            item_id=self.item_id,
            name=self.name,
            category=self.category,
            quantity=quantity,
            unit_price=self.price_money,
            special_instructions=special_instructions,
        )
