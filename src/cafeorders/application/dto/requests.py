from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class PlaceOrderLineRequest(CamelBaseModel):
    menu_item_id: str
    quantity: int
    special_instructions: str | None = Field(default=None, max_length=500)


class PlaceOrderRequest(CamelBaseModel):
    table_number: int = Field(ge=1)
    customer_name: str
    customer_phone: str
    items: list[PlaceOrderLineRequest] = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=1000)
    offer_id: str | None = None
    offer_code: str | None = None


class UpdateOrderNotesRequest(CamelBaseModel):
    notes: str | None = Field(default=None, max_length=1000)
