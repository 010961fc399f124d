from __future__ import annotations

import re
from datetime import date

ORDER_NUMBER_PREFIX = "ORD"
SEQUENCE_WIDTH = 4

_ORDER_NUMBER_RE = re.compile(r"^ORD-(\d{8})-(\d{4,})$")


def day_key(day: date) -> str:
    return day.strftime("%Y%m%d")


def format_order_number(day: date, sequence: int) -> str:
    """Render the external order number, e.g. ``ORD-20250301-0007``.

    The sequence is zero-padded to four digits; a day that goes past 9999
    orders keeps counting with a wider suffix instead of wrapping.
    """
    if sequence < 1:
        raise ValueError("sequence must be >= 1")
    return f"{ORDER_NUMBER_PREFIX}-{day_key(day)}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_order_number(value: str) -> tuple[str, int]:
    match = _ORDER_NUMBER_RE.match(value)
    if match is None:
        raise ValueError(f"malformed order number: {value}")
    return match.group(1), int(match.group(2))
