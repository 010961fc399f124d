from __future__ import annotations

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "UTC"
DEFAULT_CURRENCY = "INR"
DEFAULT_HISTORY_RETENTION_DAYS = 30
DEFAULT_APP_ENV = "dev"


def app_env() -> str:
    return os.getenv("APP_ENV", DEFAULT_APP_ENV).strip().lower() or DEFAULT_APP_ENV


def business_timezone() -> ZoneInfo:
    name = os.getenv("CAFE_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"CAFE_TIMEZONE={name} is not a known timezone") from exc


def currency() -> str:
    value = os.getenv("CAFE_CURRENCY", DEFAULT_CURRENCY).strip().upper()
    if len(value) != 3 or not value.isalpha():
        raise RuntimeError(f"CAFE_CURRENCY={value} is not a 3-letter currency code")
    return value


def history_retention_days() -> int:
    raw = os.getenv("ORDER_HISTORY_RETENTION_DAYS", str(DEFAULT_HISTORY_RETENTION_DAYS))
    try:
        days = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"ORDER_HISTORY_RETENTION_DAYS={raw} is not an integer") from exc
    if days < 1:
        raise RuntimeError("ORDER_HISTORY_RETENTION_DAYS must be >= 1")
    return days
