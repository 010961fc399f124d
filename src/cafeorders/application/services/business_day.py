from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo


def business_day(now: datetime, tz: tzinfo) -> date:
    return now.astimezone(tz).date()


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Half-open ``[start, end)`` range covering ``day`` in the café's timezone."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end
