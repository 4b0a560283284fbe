from __future__ import annotations

from datetime import date

from src.analytics.earnings import (
    build_earnings_history,
    build_team_earnings,
    calculate_monthly_earnings,
    calculate_output_credits,
    service_commission_date,
)
from src.models.crm import (
    ActivityRewardRecord,
    AssignmentRecord,
    ColleagueRecord,
    CreativeOutputRecord,
    EngagementRecord,
    UpsellCommissionRecord,
)


COLLEAGUES = [
    ColleagueRecord(id="colleague-1", full_name="Jana Novak", status="active"),
    ColleagueRecord(id="colleague-2", full_name="Petr Svoboda", status="active"),
    ColleagueRecord(id="colleague-3", full_name="Former", status="inactive"),
]

ENGAGEMENTS = [
    EngagementRecord(id="eng-1", client_id="client-1", status="active", start_date="2025-01-01", monthly_fee=2000),
    EngagementRecord(id="eng-2", client_id="client-2", status="paused", start_date="2025-01-01", monthly_fee=900),
]

ASSIGNMENTS = [
    AssignmentRecord(
        id="a-1", engagement_id="eng-1", colleague_id="colleague-1", cost_model="fixed_monthly", monthly_cost=500, start_date="2025-01-01"
    ),
    AssignmentRecord(
        id="a-2", engagement_id="eng-1", colleague_id="colleague-2", cost_model="percentage", percentage_of_revenue=10, start_date="2025-02-01"
    ),
    AssignmentRecord(
        id="a-3", engagement_id="eng-2", colleague_id="colleague-2", cost_model="fixed_monthly", monthly_cost=400, start_date="2025-01-01"
    ),
    AssignmentRecord(
        id="a-4", engagement_id="eng-1", colleague_id="colleague-2", cost_model="hourly", hourly_cost=35, start_date="2025-01-01"
    ),
]

REWARDS = [
    ActivityRewardRecord(id="r-1", colleague_id="colleague-2", amount=300, activity_date="2025-03-12"),
    ActivityRewardRecord(id="r-2", colleague_id="colleague-2", amount=50, activity_date="2025-02-27"),
    ActivityRewardRecord(id="r-3", colleague_id="colleague-1", amount=80, activity_date=None),
]


def test_team_earnings_for_month() -> None:
    summary = build_team_earnings(2025, 3, COLLEAGUES, ASSIGNMENTS, ENGAGEMENTS, REWARDS)
    assert [row.colleague_id for row in summary.colleagues] == ["colleague-1", "colleague-2"]

    jana, petr = summary.colleagues
    assert (jana.fixed_earnings, jana.activities_reward, jana.total_earnings) == (500.0, 0.0, 500.0)
    assert (petr.fixed_earnings, petr.activities_reward, petr.activities_count) == (200.0, 300.0, 1)
    assert petr.engagement_count == 1
    assert summary.team_total == 1000.0
    assert summary.average_per_colleague == 500.0


def test_team_earnings_without_colleagues() -> None:
    summary = build_team_earnings(2025, 3, [], ASSIGNMENTS, ENGAGEMENTS, REWARDS)
    assert summary.colleagues == []
    assert summary.average_per_colleague == 0.0


def test_earnings_history_most_recent_first() -> None:
    history = build_earnings_history("colleague-2", date(2025, 3, 20), 3, ASSIGNMENTS, ENGAGEMENTS, REWARDS)
    assert [(point.year, point.month) for point in history] == [(2025, 3), (2025, 2), (2025, 1)]
    assert [point.total_earnings for point in history] == [500.0, 250.0, 0.0]


def test_assignment_without_start_date_is_paid() -> None:
    engagements = {"eng-1": ENGAGEMENTS[0]}
    undated = [
        AssignmentRecord(id="a-9", engagement_id="eng-1", colleague_id="colleague-1", cost_model="fixed_monthly", monthly_cost=500)
    ]
    monthly = calculate_monthly_earnings("colleague-1", 2025, 3, undated, engagements, [])
    assert monthly.fixed_earnings == 500.0


def test_express_outputs_earn_one_and_a_half_credits() -> None:
    assert calculate_output_credits(2, 1, 4) == (8.0, 6.0, 14.0)
    assert calculate_output_credits(0, 0, 4) == (0.0, 0.0, 0.0)


def test_service_commission_month() -> None:
    created = date(2025, 3, 18)
    assert service_commission_date("one_off", date(2025, 4, 1), created) == created
    assert service_commission_date("monthly", date(2025, 4, 1), created) == date(2025, 4, 1)
    assert service_commission_date("monthly", date(2025, 4, 12), created) == date(2025, 5, 1)
    assert service_commission_date("monthly", date(2025, 12, 5), created) == date(2026, 1, 1)
    assert service_commission_date("monthly", None, created) == created


def test_credits_and_commissions_fold_into_total() -> None:
    outputs = [
        CreativeOutputRecord(id="o-1", colleague_id="colleague-2", year=2025, month=3, normal_count=3, base_credits=2),
        CreativeOutputRecord(
            id="o-2", colleague_id="colleague-2", year=2025, month=3, express_count=2, base_credits=1, reward_per_credit=100
        ),
        CreativeOutputRecord(id="o-3", colleague_id="colleague-2", year=2025, month=2, normal_count=5, base_credits=1),
    ]
    commissions = [
        UpsellCommissionRecord(
            id="c-1", colleague_id="colleague-2", item_type="extra_work", amount=1500, commission_percent=10, commission_date="2025-03-20"
        ),
        UpsellCommissionRecord(
            id="c-2", colleague_id="colleague-2", item_type="service", amount=900, commission_percent=10, commission_date=None
        ),
    ]
    summary = build_team_earnings(2025, 3, COLLEAGUES, ASSIGNMENTS, ENGAGEMENTS, REWARDS, outputs, commissions)
    petr = next(row for row in summary.colleagues if row.colleague_id == "colleague-2")
    # 6 normal credits at the default rate plus 3 express credits at 100
    assert (petr.creative_boost_credits, petr.creative_boost_reward) == (9.0, 780.0)
    assert (petr.commissions_reward, petr.commissions_count) == (150.0, 1)
    assert petr.total_earnings == 200.0 + 780.0 + 150.0 + 300.0
    assert summary.colleagues[0].colleague_id == "colleague-2"
