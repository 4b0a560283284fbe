from __future__ import annotations

from datetime import date
from typing import Collection, Iterable, List, Optional, Protocol, TypeVar

from src.analytics.periods import TimeRange


ACTIVE_LIKE_STATUSES = frozenset({"active", "completed"})


class Dated(Protocol):
    start_date: Optional[date]
    end_date: Optional[date]


class DatedWithStatus(Dated, Protocol):
    status: Optional[str]


T = TypeVar("T", bound=Dated)
S = TypeVar("S", bound=DatedWithStatus)


def overlaps(start: Optional[date], end: Optional[date], period: TimeRange) -> bool:
    """Inclusive overlap: active for any part of ``period`` counts.

    A record without a usable start date is never a member.
    """
    if start is None:
        return False
    return start <= period.end and (end is None or end >= period.start)


def is_member(record: Dated, period: TimeRange) -> bool:
    return overlaps(record.start_date, record.end_date, period)


def is_engagement_active_in(
    engagement: DatedWithStatus,
    period: TimeRange,
    statuses: Collection[str] = ACTIVE_LIKE_STATUSES,
) -> bool:
    return engagement.status in statuses and is_member(engagement, period)


def filter_members(records: Iterable[T], period: TimeRange) -> List[T]:
    return [record for record in records if is_member(record, period)]


def filter_active(
    records: Iterable[S],
    period: TimeRange,
    statuses: Collection[str] = ACTIVE_LIKE_STATUSES,
) -> List[S]:
    return [record for record in records if is_engagement_active_in(record, period, statuses)]
