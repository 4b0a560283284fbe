from __future__ import annotations

from datetime import date
from typing import List

from src.analytics.funnel import (
    STAGE_ORDER,
    build_funnel_summary,
    calculate_monthly_trend,
    calculate_overall_conversion,
    calculate_source_breakdown,
    calculate_stage_conversion_rates,
    is_valid_transition,
)
from src.analytics.periods import month_range
from src.models.leads import NewLeadEntryRecord, StageTransitionRecord


def _intake(count: int, entered_at: str = "2025-03-01", source: str = "web") -> List[NewLeadEntryRecord]:
    return [
        NewLeadEntryRecord(lead_id=f"lead-{source}-{index}", entered_at=entered_at, source=source)
        for index in range(count)
    ]


def _transitions(count: int, from_stage: str, to_stage: str, confirmed_at: str = "2025-03-10") -> List[StageTransitionRecord]:
    return [
        StageTransitionRecord(
            lead_id=f"lead-{index}", from_stage=from_stage, to_stage=to_stage, confirmed_at=confirmed_at
        )
        for index in range(count)
    ]


def test_intake_is_denominator_for_first_step() -> None:
    intake = _intake(100)
    transitions = _transitions(30, "new_lead", "meeting_done") + _transitions(10, "offer_sent", "won")

    rates = calculate_stage_conversion_rates(transitions, intake)
    assert len(rates) == len(STAGE_ORDER) - 1
    assert (rates[0].from_stage, rates[0].to_stage) == ("new_lead", "meeting_done")
    assert rates[0].rate == 30.0
    assert rates[0].total == 100
    assert calculate_overall_conversion(transitions, intake) == 10.0


def test_later_steps_use_entries_into_from_stage() -> None:
    transitions = (
        _transitions(4, "new_lead", "meeting_done")
        + _transitions(3, "meeting_done", "waiting_access")
        + _transitions(1, "meeting_done", "lost")
    )
    rates = {rate.from_stage: rate for rate in calculate_stage_conversion_rates(transitions, _intake(8))}
    assert rates["new_lead"].rate == 50.0
    assert rates["meeting_done"].rate == 75.0
    assert rates["meeting_done"].total == 4
    assert rates["waiting_access"].rate == 0.0


def test_empty_log_gives_zero_rates() -> None:
    for intake in (_intake(5), []):
        rates = calculate_stage_conversion_rates([], intake)
        assert all(rate.rate == 0.0 for rate in rates)
        assert calculate_overall_conversion([], intake) == 0.0


def test_overall_conversion_is_clamped() -> None:
    transitions = _transitions(5, "offer_sent", "won")
    assert calculate_overall_conversion(transitions, _intake(2)) == 100.0
    rates = calculate_stage_conversion_rates(transitions, _intake(2))
    assert all(0.0 <= rate.rate <= 100.0 for rate in rates)


def test_monthly_trend_buckets_by_month() -> None:
    intake = _intake(2, "2025-02-05") + _intake(4, "2025-03-02", source="ads")
    transitions = _transitions(1, "offer_sent", "won", confirmed_at="2025-03-20")
    trend = calculate_monthly_trend(transitions, intake, as_of=date(2025, 3, 15), months=2)
    assert [point.period_start for point in trend] == [date(2025, 2, 1), date(2025, 3, 1)]
    assert (trend[0].rate, trend[0].intake) == (0.0, 2)
    assert (trend[1].rate, trend[1].count, trend[1].intake) == (25.0, 1, 4)


def test_summary_counts() -> None:
    summary = build_funnel_summary(
        _transitions(2, "new_lead", "meeting_done"), _intake(4), as_of=date(2025, 3, 31), trend_months=6
    )
    assert summary.total_transitions == 2
    assert summary.intake_count == 4
    assert summary.conversion_rates[0].rate == 50.0
    assert len(summary.monthly_trend) == 6


def test_source_breakdown_sorted_by_lead_count() -> None:
    intake = [
        NewLeadEntryRecord(lead_id="l-1", entered_at="2025-03-01", source="referral", is_qualified=True, is_won=True, value=900),
        NewLeadEntryRecord(lead_id="l-2", entered_at="2025-03-02", source="web", is_qualified=True),
        NewLeadEntryRecord(lead_id="l-3", entered_at="2025-03-03", source="web"),
        NewLeadEntryRecord(lead_id="l-4", entered_at="2025-04-01", source="web"),
        NewLeadEntryRecord(lead_id="l-5", entered_at=None, source=None),
    ]
    breakdown = calculate_source_breakdown(intake, month_range(2025, 3))
    assert [row.source for row in breakdown] == ["web", "referral"]
    assert (breakdown[0].lead_count, breakdown[0].qualified_count, breakdown[0].won_count) == (2, 1, 0)
    assert breakdown[1].win_rate == 100.0
    assert breakdown[1].total_value == 900.0


def test_missing_source_defaults_to_other() -> None:
    entry = NewLeadEntryRecord(lead_id="l-1", entered_at="2025-03-01", source="")
    assert entry.source == "other"


def test_transition_validation() -> None:
    assert is_valid_transition("new_lead", "meeting_done") is True
    assert is_valid_transition("offer_sent", "lost") is True
    assert is_valid_transition("won", "won") is False
    assert is_valid_transition("new_lead", "signed") is False
