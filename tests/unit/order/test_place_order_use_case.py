from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from cafeorders.application.dto.requests import PlaceOrderLineRequest, PlaceOrderRequest
from cafeorders.application.mappers.event_envelope import TraceContext
from cafeorders.application.ports.repositories import ItemUnavailableError
from cafeorders.application.services.offer_ledger import OfferLedger
from cafeorders.application.services.sequence_allocator import (
    AllocatorUnavailableError,
    SequenceAllocator,
)
from cafeorders.application.use_cases.place_order import (
    OrderValidationError,
    PlaceOrder,
    TableInactiveError,
)
from cafeorders.domain.common.ids import MenuItemId, OfferId
from cafeorders.domain.common.money import Money
from cafeorders.domain.menu.entities import MenuItem
from cafeorders.domain.offer.entities import DiscountType

TRACE = TraceContext(trace_id=None, request_id="req-1")


@pytest.fixture
def place_order(
    table_registry,
    catalog,
    order_repository,
    offer_repository,
    sequence_counter,
    publisher,
    now,
) -> PlaceOrder:
    return PlaceOrder(
        table_registry=table_registry,
        catalog=catalog,
        order_repository=order_repository,
        offer_ledger=OfferLedger(offer_repository),
        sequence_allocator=SequenceAllocator(sequence_counter),
        publisher=publisher,
        clock=lambda: now,
    )


def _request(**overrides: object) -> PlaceOrderRequest:
    fields: dict[str, object] = {
        "tableNumber": 1,
        "customerName": "Asha",
        "customerPhone": "98765 43210",
        "items": [
            PlaceOrderLineRequest(menuItemId="itm_chai", quantity=2),
            PlaceOrderLineRequest(
                menuItemId="itm_sandwich", quantity=1, specialInstructions="no onion"
            ),
        ],
    }
    fields.update(overrides)
    return PlaceOrderRequest.model_validate(fields)


def test_place_order_creates_numbered_pending_order(
    place_order, order_repository, publisher
) -> None:
    response = place_order.execute(_request(notes="window seat"), TRACE)

    assert response.status == "pending"
    assert response.orderNumber == "ORD-20250301-0001"
    assert response.token == 1
    assert response.customerPhone == "9876543210"
    assert response.subtotal.amountCents == 20500
    assert response.discount.amountCents == 0
    assert response.total.amountCents == 20500
    assert response.itemCount == 3
    assert response.items[1].specialInstructions == "no onion"
    assert order_repository.get(response.orderId) is not None

    assert len(publisher.messages) == 1
    channel, message = publisher.messages[0]
    envelope = json.loads(message)
    assert channel == "events:orders"
    assert envelope["event_type"] == "order.placed"
    assert envelope["request_id"] == "req-1"
    assert envelope["payload"]["orderNumber"] == "ORD-20250301-0001"


def test_consecutive_orders_get_consecutive_numbers(place_order) -> None:
    first = place_order.execute(_request(), TRACE)
    second = place_order.execute(_request(), TRACE)

    assert first.orderNumber == "ORD-20250301-0001"
    assert second.orderNumber == "ORD-20250301-0002"


def test_offer_discount_is_applied(place_order, offer_repository, make_offer) -> None:
    offer_repository.put(make_offer(max_discount=Money(amount_cents=2000, currency="INR")))

    response = place_order.execute(_request(offerId="off_001"), TRACE)

    assert response.discount.amountCents == 2000
    assert response.total.amountCents == 18500
    assert response.offerId == "off_001"
    assert offer_repository.get(OfferId("off_001")).used_count == 1


def test_ineligible_offer_places_order_without_discount(
    place_order, offer_repository, make_offer
) -> None:
    offer_repository.put(make_offer(is_active=False))

    response = place_order.execute(_request(offerCode="welcome10"), TRACE)

    assert response.discount.amountCents == 0
    assert response.offerId is None


def test_inactive_table_is_rejected_before_allocation(
    place_order, sequence_counter, order_repository
) -> None:
    with pytest.raises(TableInactiveError):
        place_order.execute(_request(tableNumber=9), TRACE)

    assert sequence_counter.increment("20250301") == 1
    assert order_repository.all() == []


def test_unavailable_item_is_rejected(place_order, order_repository) -> None:
    with pytest.raises(ItemUnavailableError):
        place_order.execute(
            _request(items=[PlaceOrderLineRequest(menuItemId="itm_brownie", quantity=1)]),
            TRACE,
        )

    assert order_repository.all() == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"customerPhone": "12345"},
        {"customerPhone": "tel:98765abc43210!!"},
        {"customerName": "   "},
        {"items": [PlaceOrderLineRequest(menuItemId="itm_chai", quantity=0)]},
    ],
)
def test_invalid_requests_are_rejected(place_order, table_registry, overrides) -> None:
    with pytest.raises(OrderValidationError):
        place_order.execute(_request(**overrides), TRACE)

    assert table_registry.checked == []


def test_persistence_failure_releases_offer(
    place_order, order_repository, offer_repository, make_offer
) -> None:
    offer_repository.put(make_offer(usage_limit=1))
    order_repository.fail_on_add = RuntimeError("disk full")

    with pytest.raises(RuntimeError):
        place_order.execute(_request(offerId="off_001"), TRACE)

    assert offer_repository.get(OfferId("off_001")).used_count == 0


def test_allocator_failure_releases_offer(
    place_order, sequence_counter, offer_repository, make_offer
) -> None:
    offer_repository.put(make_offer(usage_limit=1))
    sequence_counter.unavailable = True

    with pytest.raises(AllocatorUnavailableError):
        place_order.execute(_request(offerId="off_001"), TRACE)

    assert offer_repository.get(OfferId("off_001")).used_count == 0


def test_publish_failure_does_not_fail_the_order(
    place_order, publisher, order_repository
) -> None:
    publisher.fail = True

    response = place_order.execute(_request(), TRACE)

    assert order_repository.get(response.orderId) is not None


def test_concurrent_orders_get_distinct_numbers(place_order, order_repository) -> None:
    order_count = 40

    with ThreadPoolExecutor(max_workers=8) as pool:
        responses = list(
            pool.map(lambda _: place_order.execute(_request(), TRACE), range(order_count))
        )

    numbers = {response.orderNumber for response in responses}
    assert len(numbers) == order_count
    assert {response.token for response in responses} == set(range(1, order_count + 1))
    assert len(order_repository.all()) == order_count


@pytest.mark.parametrize(
    ("items", "offer_overrides"),
    [
        ([("itm_water", 2)], {}),
        ([("itm_water", 1), ("itm_chai", 1)], {}),
        (
            [("itm_water", 3)],
            {"discount_type": DiscountType.FLAT, "discount_value": Decimal("500")},
        ),
        ([("itm_water", 1), ("itm_chai", 1)], {"discount_value": Decimal("100")}),
    ],
)
def test_free_items_never_produce_negative_totals(
    place_order, catalog, offer_repository, make_offer, items, offer_overrides
) -> None:
    catalog.add(
        MenuItem(
            item_id=MenuItemId("itm_water"),
            name="Tap Water",
            category="beverages",
            price_money=Money(amount_cents=0, currency="INR"),
            is_available=True,
        )
    )
    offer_repository.put(make_offer(**offer_overrides))

    response = place_order.execute(
        _request(
            offerId="off_001",
            items=[
                PlaceOrderLineRequest(menuItemId=item_id, quantity=quantity)
                for item_id, quantity in items
            ],
        ),
        TRACE,
    )

    subtotal = response.subtotal.amountCents
    discount = response.discount.amountCents
    assert discount <= subtotal
    assert response.total.amountCents == max(0, subtotal - discount)
