from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Dict, List, Sequence

from src.analytics.aggregation import group_records, safe_rate
from src.analytics.periods import TimeRange, trailing_months
from src.models.leads import NewLeadEntryRecord, StageTransitionRecord
from src.schemas.funnel import (
    ConversionTrendPoint,
    FunnelPassthroughSummary,
    LeadSourceBreakdown,
    StageConversionRate,
)


NEW_LEAD = "new_lead"
WON = "won"
LOST = "lost"
POSTPONED = "postponed"

# Main chain of the lead pipeline; lost/postponed are side states outside it.
STAGE_ORDER: List[str] = [
    NEW_LEAD,
    "meeting_done",
    "waiting_access",
    "access_received",
    "preparing_offer",
    "offer_sent",
    WON,
]

SIDE_STAGES = frozenset({LOST, POSTPONED})
ALL_STAGES = frozenset(STAGE_ORDER) | SIDE_STAGES


def count_stage_entries(transitions: Sequence[StageTransitionRecord]) -> Dict[str, int]:
    entries = {stage: 0 for stage in STAGE_ORDER}
    for transition in transitions:
        if transition.to_stage in entries:
            entries[transition.to_stage] += 1
    return entries


def calculate_stage_conversion_rates(
    transitions: Sequence[StageTransitionRecord],
    intake: Sequence[NewLeadEntryRecord],
) -> List[StageConversionRate]:
    """Pairwise pass-through between adjacent stages of ``STAGE_ORDER``.

    The first step is measured against the whole intake, including leads that
    never had a transition logged; later steps use entries into the from-stage.
    """
    stage_entries = count_stage_entries(transitions)
    pair_counts = Counter((t.from_stage, t.to_stage) for t in transitions)

    rates: List[StageConversionRate] = []
    for from_stage, to_stage in zip(STAGE_ORDER, STAGE_ORDER[1:]):
        count = pair_counts.get((from_stage, to_stage), 0)
        denominator = len(intake) if from_stage == NEW_LEAD else stage_entries[from_stage]
        rates.append(
            StageConversionRate(
                from_stage=from_stage,
                to_stage=to_stage,
                rate=round(safe_rate(count, denominator), 2),
                count=count,
                total=denominator,
            )
        )
    return rates


def calculate_overall_conversion(
    transitions: Sequence[StageTransitionRecord],
    intake: Sequence[NewLeadEntryRecord],
) -> float:
    won_count = sum(1 for t in transitions if t.to_stage == WON)
    return round(safe_rate(won_count, len(intake)), 2)


def calculate_monthly_trend(
    transitions: Sequence[StageTransitionRecord],
    intake: Sequence[NewLeadEntryRecord],
    as_of: date,
    months: int = 12,
) -> List[ConversionTrendPoint]:
    trend: List[ConversionTrendPoint] = []
    for period in trailing_months(as_of, months):
        month_intake = [
            entry for entry in intake if entry.entered_at and period.contains(entry.entered_at)
        ]
        month_won = [
            t
            for t in transitions
            if t.to_stage == WON and t.confirmed_at and period.contains(t.confirmed_at)
        ]
        trend.append(
            ConversionTrendPoint(
                period_start=period.start,
                rate=calculate_overall_conversion(month_won, month_intake),
                count=len(month_won),
                intake=len(month_intake),
            )
        )
    return trend


def build_funnel_summary(
    transitions: Sequence[StageTransitionRecord],
    intake: Sequence[NewLeadEntryRecord],
    as_of: date,
    trend_months: int = 12,
) -> FunnelPassthroughSummary:
    return FunnelPassthroughSummary(
        conversion_rates=calculate_stage_conversion_rates(transitions, intake),
        overall_conversion=calculate_overall_conversion(transitions, intake),
        total_transitions=len(transitions),
        intake_count=len(intake),
        monthly_trend=calculate_monthly_trend(transitions, intake, as_of, trend_months),
    )


def calculate_source_breakdown(
    intake: Sequence[NewLeadEntryRecord], period: TimeRange
) -> List[LeadSourceBreakdown]:
    in_period = [entry for entry in intake if entry.entered_at and period.contains(entry.entered_at)]
    groups = group_records(
        in_period,
        key_fn=lambda entry: entry.source,
        extractors={
            "qualified": lambda entry: 1.0 if entry.is_qualified else 0.0,
            "won": lambda entry: 1.0 if entry.is_won else 0.0,
            "value": lambda entry: entry.value,
        },
        sort_by="count",
    )
    breakdown: List[LeadSourceBreakdown] = []
    for source, group in groups.items():
        won_count = int(group.totals["won"])
        breakdown.append(
            LeadSourceBreakdown(
                source=source,
                lead_count=group.count,
                qualified_count=int(group.totals["qualified"]),
                won_count=won_count,
                total_value=round(group.totals["value"], 2),
                win_rate=round(safe_rate(won_count, group.count), 2),
            )
        )
    return breakdown


def is_valid_transition(from_stage: str, to_stage: str) -> bool:
    return from_stage in ALL_STAGES and to_stage in ALL_STAGES and from_stage != to_stage
