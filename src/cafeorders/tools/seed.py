from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from cafeorders.infrastructure.db.models.menu import MenuItemModel
from cafeorders.infrastructure.db.models.offer import OfferModel
from cafeorders.infrastructure.db.models.table import TableModel
from cafeorders.infrastructure.db.session import get_engine
from cafeorders.infrastructure.settings import currency

ACTIVE_TABLES = range(1, 11)
INACTIVE_TABLE = 99


def _menu_items(currency_code: str) -> list[dict[str, object]]:
    return [
        {
            "id": "itm_001",
            "name": "Masala Chai",
            "category": "beverages",
            "price_cents": 4000,
            "currency": currency_code,
            "is_available": True,
        },
        {
            "id": "itm_002",
            "name": "Cold Coffee",
            "category": "beverages",
            "price_cents": 9000,
            "currency": currency_code,
            "is_available": True,
        },
        {
            "id": "itm_003",
            "name": "Paneer Sandwich",
            "category": "snacks",
            "price_cents": 12000,
            "currency": currency_code,
            "is_available": True,
        },
        {
            "id": "itm_004",
            "name": "Chocolate Brownie",
            "category": "desserts",
            "price_cents": 11000,
            "currency": currency_code,
            "is_available": False,
        },
    ]


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    required_tables = {"menu_items", "cafe_tables", "offers"}
    if not required_tables.issubset(set(inspector.get_table_names(schema="public"))):
        print("no schema yet")
        return

    currency_code = currency()
    now = datetime.now(timezone.utc)

    with Session(engine) as session:
        for item in _menu_items(currency_code):
            session.execute(
                insert(MenuItemModel)
                .values(**item)
                .on_conflict_do_update(
                    index_elements=[MenuItemModel.id],
                    set_={key: value for key, value in item.items() if key != "id"},
                )
            )

        for table_number in [*ACTIVE_TABLES, INACTIVE_TABLE]:
            is_active = table_number != INACTIVE_TABLE
            session.execute(
                insert(TableModel)
                .values(table_number=table_number, is_active=is_active)
                .on_conflict_do_update(
                    index_elements=[TableModel.table_number],
                    set_={"is_active": is_active},
                )
            )

        welcome_offer = {
            "id": "off_welcome10",
            "title": "10% off, up to 20",
            "discount_type": "percentage",
            "discount_value": Decimal("10"),
            "minimum_order_cents": 0,
            "max_discount_cents": 2000,
            "currency": currency_code,
            "code": "WELCOME10",
            "valid_from": now - timedelta(days=1),
            "valid_to": now + timedelta(days=365),
            "is_active": True,
            "usage_limit": 100,
            "used_count": 0,
            "applicable_categories": [],
            "applicable_items": [],
        }
        session.execute(
            insert(OfferModel)
            .values(**welcome_offer)
            .on_conflict_do_update(
                index_elements=[OfferModel.id],
                set_={key: value for key, value in welcome_offer.items() if key != "id"},
            )
        )

        session.commit()
        print("seed complete")


if __name__ == "__main__":
    main()
