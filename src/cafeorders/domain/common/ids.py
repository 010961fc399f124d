from __future__ import annotations

from typing import NewType

MenuItemId = NewType("MenuItemId", str)
OrderId = NewType("OrderId", str)
OfferId = NewType("OfferId", str)
TableNumber = NewType("TableNumber", int)
