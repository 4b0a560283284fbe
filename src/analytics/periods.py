from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

from src.shared.time import add_months, clamp, month_end


PERIOD_MODES = ("month", "quarter", "ytd", "year", "last_year")


@dataclass(frozen=True)
class TimeRange:
    """Inclusive date range; ``start <= end`` always holds."""

    start: date
    end: date

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


def month_range(year: int, month: int) -> TimeRange:
    start = date(year, clamp(month, 1, 12), 1)
    return TimeRange(start=start, end=month_end(start))


def resolve_period(
    mode: str,
    year: int,
    month: int = 1,
    quarter: int = 1,
    today: date | None = None,
) -> TimeRange:
    """Date range for a period selector.

    ``today`` is only consulted by ``ytd`` and ``last_year``; it defaults to
    Jan 1 of ``year`` purely so the function stays total, callers are expected
    to pass the real reference date.
    """
    reference = today or date(year, 1, 1)
    if mode == "quarter":
        first_month = (clamp(quarter, 1, 4) - 1) * 3 + 1
        start = date(year, first_month, 1)
        return TimeRange(start=start, end=month_end(date(year, first_month + 2, 1)))
    if mode == "ytd":
        start = date(year, 1, 1)
        year_end = date(year, 12, 31)
        if reference < start:
            return TimeRange(start=start, end=year_end)
        return TimeRange(start=start, end=min(reference, year_end))
    if mode == "year":
        return TimeRange(start=date(year, 1, 1), end=date(year, 12, 31))
    if mode == "last_year":
        previous = reference.year - 1
        return TimeRange(start=date(previous, 1, 1), end=date(previous, 12, 31))
    return month_range(year, month)


def resolve_comparison_period(
    mode: str,
    year: int,
    month: int = 1,
    quarter: int = 1,
    today: date | None = None,
) -> TimeRange:
    """The preceding period of the same shape, for period-over-period deltas."""
    current = resolve_period(mode, year, month, quarter, today)
    if mode == "quarter":
        start = add_months(current.start, -3)
        return TimeRange(start=start, end=month_end(add_months(current.start, -1)))
    if mode == "ytd":
        start = date(current.start.year - 1, 1, 1)
        end = _same_day_previous_year(current.end)
        return TimeRange(start=start, end=end)
    if mode in ("year", "last_year"):
        previous = current.start.year - 1
        return TimeRange(start=date(previous, 1, 1), end=date(previous, 12, 31))
    start = add_months(current.start, -1)
    return TimeRange(start=start, end=month_end(start))


def period_label(mode: str, year: int, month: int = 1, quarter: int = 1, today: date | None = None) -> str:
    if mode == "quarter":
        return f"Q{clamp(quarter, 1, 4)} {year}"
    if mode == "ytd":
        return f"YTD {year}"
    if mode == "year":
        return str(year)
    if mode == "last_year":
        return str(resolve_period(mode, year, month, quarter, today).start.year)
    return f"{year}-{clamp(month, 1, 12):02d}"


def trailing_months(anchor: date, count: int) -> List[TimeRange]:
    """``count`` calendar months ending with ``anchor``'s month, oldest first."""
    ranges: List[TimeRange] = []
    for offset in range(count - 1, -1, -1):
        start = add_months(anchor, -offset)
        ranges.append(TimeRange(start=start, end=month_end(start)))
    return ranges


def _same_day_previous_year(value: date) -> date:
    if value.month == 2 and value.day == 29:
        return date(value.year - 1, 2, 28)
    return date(value.year - 1, value.month, value.day)
