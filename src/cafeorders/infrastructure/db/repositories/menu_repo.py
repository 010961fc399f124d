from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from cafeorders.application.ports.repositories import (
    CatalogSnapshotProvider,
    ItemUnavailableError,
    RequestedLine,
)
from cafeorders.domain.common.ids import MenuItemId
from cafeorders.domain.common.money import Money
from cafeorders.domain.menu.entities import MenuItem
from cafeorders.domain.order.entities import OrderLine
from cafeorders.infrastructure.db.models.menu import MenuItemModel
from cafeorders.infrastructure.db.session import get_engine, storage_errors


class SqlAlchemyCatalogSnapshotProvider(CatalogSnapshotProvider):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def price_lines(self, requested_lines: Sequence[RequestedLine]) -> list[OrderLine]:
        item_ids = {str(line.item_id) for line in requested_lines}
        statement = select(MenuItemModel).where(MenuItemModel.id.in_(item_ids))
        with storage_errors("catalog lookup"), Session(self._engine) as session:
            menu_items = {
                model.id: self._to_domain(model)
                for model in session.execute(statement).scalars().all()
            }

        lines: list[OrderLine] = []
        for requested in requested_lines:
            menu_item = menu_items.get(str(requested.item_id))
            if menu_item is None:
                raise ItemUnavailableError(f"menu item {requested.item_id} does not exist")
            if not menu_item.is_available:
                raise ItemUnavailableError(f"menu item {requested.item_id} is unavailable")
            lines.append(
                menu_item.snapshot(
                    quantity=requested.quantity,
                    special_instructions=requested.special_instructions,
                )
            )
        return lines

    def _to_domain(self, model: MenuItemModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            name=model.name,
            category=model.category,
            price_money=Money(amount_cents=model.price_cents, currency=model.currency),
            is_available=model.is_available,
        )
