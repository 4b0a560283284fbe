from __future__ import annotations

import math
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Sequence

from src.analytics.aggregation import safe_divide
from src.analytics.periods import month_range
from src.models.crm import (
    AssignmentRecord,
    ColleagueRecord,
    EngagementRecord,
    PlannedEngagementRecord,
)
from src.schemas.capacity import (
    CapacityEvent,
    ColleagueCapacityProjection,
    SlotUtilization,
)
from src.shared.time import same_month


SLOT_TYPES = ("meta", "google", "graphics")
DEFAULT_SLOTS: Dict[str, int] = {"meta": 3, "google": 2, "graphics": 2}
DEFAULT_FALLBACK_SLOT = "meta"

ATTRIBUTION_PRIMARY = "primary"
ATTRIBUTION_PER_ASSIGNMENT = "per_assignment"

KeywordTable = Mapping[str, Sequence[str]]


def resolve_capacity_slots(raw: Any, defaults: Mapping[str, int] = DEFAULT_SLOTS) -> Dict[str, int]:
    """Capacity per channel, falling back to ``defaults`` for anything unusable."""
    if not isinstance(raw, Mapping):
        return dict(defaults)
    slots: Dict[str, int] = {}
    for slot_type, default in defaults.items():
        value = raw.get(slot_type)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value >= 0:
            slots[slot_type] = int(value)
        else:
            slots[slot_type] = default
    return slots


def classify_text(text: Optional[str], table: KeywordTable) -> Optional[str]:
    lowered = (text or "").lower()
    if not lowered:
        return None
    for slot_type, keywords in table.items():
        if any(keyword.lower() in lowered for keyword in keywords):
            return slot_type
    return None


def classify_position(
    position: Optional[str], table: KeywordTable, fallback: str = DEFAULT_FALLBACK_SLOT
) -> str:
    return classify_text(position, table) or fallback


def classify_service(
    service_name: Optional[str], service_code: Optional[str], table: KeywordTable
) -> Optional[str]:
    return classify_text(service_name, table) or classify_text(service_code, table)


def project_colleague_capacity(
    colleague: ColleagueRecord,
    year: int,
    month: int,
    assignments: Sequence[AssignmentRecord],
    engagements_by_id: Mapping[str, EngagementRecord],
    planned_for_month: Sequence[PlannedEngagementRecord],
    position_keywords: KeywordTable,
    default_slots: Mapping[str, int] = DEFAULT_SLOTS,
    fallback_slot: str = DEFAULT_FALLBACK_SLOT,
    attribution: str = ATTRIBUTION_PRIMARY,
) -> ColleagueCapacityProjection:
    period = month_range(year, month)
    slots = resolve_capacity_slots(colleague.capacity_slots, default_slots)
    primary = classify_position(colleague.position, position_keywords, fallback_slot)

    def channel_for(assignment: AssignmentRecord) -> str:
        if attribution == ATTRIBUTION_PER_ASSIGNMENT and assignment.slot_type in slots:
            return assignment.slot_type
        return primary

    current = []
    for assignment in assignments:
        if assignment.colleague_id != colleague.id:
            continue
        engagement = engagements_by_id.get(assignment.engagement_id)
        if engagement is None or engagement.status != "active":
            continue
        if assignment.end_date is None or assignment.end_date > period.start:
            current.append(assignment)

    ending = []
    for assignment in current:
        engagement_end = engagements_by_id[assignment.engagement_id].end_date
        if engagement_end and period.contains(engagement_end):
            ending.append(assignment)

    new_planned = [p for p in planned_for_month if colleague.id in p.assigned_colleague_ids]

    current_by_slot: Dict[str, int] = defaultdict(int)
    ending_by_slot: Dict[str, int] = defaultdict(int)
    for assignment in current:
        current_by_slot[channel_for(assignment)] += 1
    for assignment in ending:
        ending_by_slot[channel_for(assignment)] += 1
    new_by_slot = {primary: len(new_planned)}

    utilization: List[SlotUtilization] = []
    for slot_type in _ordered_slot_types(slots, primary):
        capacity = slots.get(slot_type, 0)
        slot_current = current_by_slot.get(slot_type, 0)
        after_endings = slot_current - ending_by_slot.get(slot_type, 0)
        after_new = after_endings + new_by_slot.get(slot_type, 0)
        utilization.append(
            SlotUtilization(
                slot_type=slot_type,
                capacity=capacity,
                current=slot_current,
                after_endings=after_endings,
                after_new=after_new,
                projected_ratio=round(safe_divide(after_new, capacity), 4),
            )
        )

    events: List[CapacityEvent] = []
    for assignment in ending:
        engagement = engagements_by_id[assignment.engagement_id]
        events.append(
            CapacityEvent(
                event_date=engagement.end_date,
                type="freed",
                name=engagement.name,
                slot_type=channel_for(assignment),
            )
        )
    for planned in new_planned:
        if planned.start_date is None:
            continue
        events.append(
            CapacityEvent(event_date=planned.start_date, type="filled", name=planned.name, slot_type=primary)
        )
    events.sort(key=lambda event: event.event_date)

    after_endings_total = len(current) - len(ending)
    return ColleagueCapacityProjection(
        colleague_id=colleague.id,
        full_name=colleague.full_name,
        primary_slot_type=primary,
        slots=slots,
        slot_utilization=utilization,
        current=len(current),
        after_endings=after_endings_total,
        after_new=after_endings_total + len(new_planned),
        utilization_ratio=round(
            safe_divide(current_by_slot.get(primary, 0), slots.get(primary, 0)), 4
        ),
        events=events,
        has_changes=bool(events),
    )


def project_team_capacity(
    year: int,
    month: int,
    colleagues: Sequence[ColleagueRecord],
    assignments: Sequence[AssignmentRecord],
    engagements: Sequence[EngagementRecord],
    planned: Sequence[PlannedEngagementRecord],
    position_keywords: KeywordTable,
    default_slots: Mapping[str, int] = DEFAULT_SLOTS,
    fallback_slot: str = DEFAULT_FALLBACK_SLOT,
    attribution: str = ATTRIBUTION_PRIMARY,
) -> List[ColleagueCapacityProjection]:
    """Capacity of every active colleague for a target month.

    Colleagues with upcoming events come first, then by current utilisation
    descending; the sort is stable so input order breaks ties.
    """
    engagements_by_id = {engagement.id: engagement for engagement in engagements}
    planned_for_month = [
        p for p in planned if p.start_date is not None and same_month(p.start_date, year, month)
    ]
    projections = [
        project_colleague_capacity(
            colleague,
            year,
            month,
            assignments,
            engagements_by_id,
            planned_for_month,
            position_keywords,
            default_slots,
            fallback_slot,
            attribution,
        )
        for colleague in colleagues
        if colleague.status == "active"
    ]
    return sorted(
        projections,
        key=lambda projection: (not projection.has_changes, -projection.utilization_ratio),
    )


def calculate_free_capacity(
    projections: Sequence[ColleagueCapacityProjection],
    slot_types: Sequence[str] = SLOT_TYPES,
) -> Dict[str, int]:
    free = {slot_type: 0 for slot_type in slot_types}
    for projection in projections:
        for slot in projection.slot_utilization:
            free[slot.slot_type] = free.get(slot.slot_type, 0) + max(0, slot.capacity - slot.after_new)
    return free


def _ordered_slot_types(slots: Mapping[str, int], primary: str) -> List[str]:
    ordered = list(slots)
    if primary not in slots:
        ordered.append(primary)
    return ordered
