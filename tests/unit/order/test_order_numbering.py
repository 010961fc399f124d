from __future__ import annotations

from datetime import date

import pytest

from cafeorders.domain.order.numbering import day_key, format_order_number, parse_order_number


def test_order_number_format() -> None:
    assert format_order_number(date(2025, 3, 1), 7) == "ORD-20250301-0007"


def test_order_number_widens_past_four_digits() -> None:
    assert format_order_number(date(2025, 3, 1), 12345) == "ORD-20250301-12345"


def test_sequence_must_be_positive() -> None:
    with pytest.raises(ValueError):
        format_order_number(date(2025, 3, 1), 0)


def test_parse_order_number() -> None:
    assert parse_order_number("ORD-20250301-0042") == ("20250301", 42)
    assert day_key(date(2025, 12, 31)) == "20251231"

    with pytest.raises(ValueError):
        parse_order_number("ORD-2025-42")
