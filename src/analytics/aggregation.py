from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, List, Mapping, Optional, TypeVar

from src.models.crm import AssignmentRecord, EngagementRecord


T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

Extractor = Callable[[T], Optional[float]]


@dataclass
class RecordGroup(Generic[K, T]):
    key: K
    records: List[T] = field(default_factory=list)
    totals: Dict[str, float] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.records)


def safe_divide(numerator: float, denominator: float) -> float:
    if not denominator or not math.isfinite(denominator):
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def safe_rate(numerator: float, denominator: float) -> float:
    """Percentage in [0, 100]; 0 for an empty denominator."""
    return max(0.0, min(safe_divide(numerator, denominator) * 100, 100.0))


def _as_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def group_records(
    records: Iterable[T],
    key_fn: Callable[[T], K],
    extractors: Optional[Mapping[str, Extractor]] = None,
    sort_by: Optional[str] = None,
    descending: bool = True,
) -> Dict[K, RecordGroup[K, T]]:
    """Group ``records`` by ``key_fn`` and sum each extractor per group.

    Groups keep first-occurrence order. ``sort_by`` names a totals field (or
    ``"count"``) to order by instead; the sort is stable.
    """
    extractors = extractors or {}
    groups: Dict[K, RecordGroup[K, T]] = {}
    for record in records:
        key = key_fn(record)
        group = groups.get(key)
        if group is None:
            group = RecordGroup(key=key, totals={name: 0.0 for name in extractors})
            groups[key] = group
        group.records.append(record)
        for name, extractor in extractors.items():
            group.totals[name] += _as_number(extractor(record))

    if sort_by is None:
        return groups

    def sort_value(group: RecordGroup[K, T]) -> float:
        if sort_by == "count":
            return float(group.count)
        return group.totals.get(sort_by, 0.0)

    ordered = sorted(groups.values(), key=sort_value, reverse=descending)
    return {group.key: group for group in ordered}


def sum_field(records: Iterable[T], extractor: Extractor) -> float:
    return sum(_as_number(extractor(record)) for record in records)


def assignment_monthly_cost(
    assignment: AssignmentRecord, engagement: Optional[EngagementRecord] = None
) -> float:
    """Monthly cost of an assignment, reading only the field its cost model selects.

    Hourly assignments carry a rate but no hours, so they contribute 0.
    """
    value = assignment.cost_value
    if value is None:
        return 0.0
    if assignment.cost_model == "fixed_monthly":
        return _as_number(value)
    if assignment.cost_model == "percentage":
        fee = engagement.monthly_fee if engagement else 0.0
        return _as_number(fee) * _as_number(value) / 100
    return 0.0
