from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Any, Optional


def coerce_date(value: Any) -> Optional[date]:
    """Best-effort conversion of a backend value to a date.

    Accepts ``date``, ``datetime`` and ISO strings (``2025-03-01``,
    ``2025-03-01T10:00:00Z``). Anything else, including malformed strings,
    becomes ``None`` so callers can drop the record instead of failing.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def month_start(value: date) -> date:
    return date(value.year, value.month, 1)


def month_end(value: date) -> date:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return date(value.year, value.month, last_day)


def add_months(value: date, months: int) -> date:
    """First day of the month ``months`` away from ``value``'s month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1)


def same_month(value: date, year: int, month: int) -> bool:
    return value.year == year and value.month == month


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))
