from __future__ import annotations

from datetime import date

from src.analytics.periods import month_range
from src.analytics.revenue import (
    build_client_history,
    build_revenue_overview,
    calculate_client_concentration,
    calculate_engagement_margin,
    calculate_mrr,
    find_ending_contracts,
    find_low_margin_engagements,
)
from src.models.crm import AssignmentRecord, ClientRecord, EngagementRecord


CLIENTS = [
    ClientRecord(id="client-1", name="Acme s.r.o.", brand_name="Acme", status="active", start_date="2024-01-01"),
    ClientRecord(id="client-2", name="Beta", status="active", start_date="2024-03-01"),
    ClientRecord(id="client-3", name="Gamma", status="inactive", start_date="2024-01-01", end_date="2024-04-30"),
]


def _engagement(engagement_id: str, client_id: str, fee: float, **kwargs) -> EngagementRecord:
    return EngagementRecord(
        id=engagement_id,
        client_id=client_id,
        name=kwargs.pop("name", engagement_id),
        status=kwargs.pop("status", "active"),
        start_date=kwargs.pop("start_date", "2024-01-01"),
        monthly_fee=fee,
        **kwargs,
    )


def _fixed(assignment_id: str, engagement_id: str, cost: float) -> AssignmentRecord:
    return AssignmentRecord(
        id=assignment_id,
        engagement_id=engagement_id,
        colleague_id="colleague-1",
        cost_model="fixed_monthly",
        monthly_cost=cost,
        start_date="2024-01-01",
    )


def test_mrr_counts_active_engagements_in_period() -> None:
    engagements = [
        _engagement("eng-1", "client-1", 1000),
        _engagement("eng-2", "client-2", 500, start_date="2024-03-01"),
        _engagement("eng-3", "client-3", 700, status="completed", end_date="2024-04-30"),
    ]
    assert calculate_mrr(engagements, month_range(2024, 2)) == 1000.0
    assert calculate_mrr(engagements, month_range(2024, 3)) == 1500.0


def test_engagement_margin() -> None:
    engagement = _engagement("eng-1", "client-1", 1000)
    assert calculate_engagement_margin(engagement, [_fixed("a-1", "eng-1", 250)]) == 75.0
    assert calculate_engagement_margin(_engagement("eng-0", "client-1", 0), [_fixed("a-1", "eng-0", 10)]) == 0.0


def test_concentration_flags_dominant_top_clients() -> None:
    engagements = [_engagement(f"eng-{index}", f"client-{index}", 100) for index in range(10)]
    shares, risk = calculate_client_concentration(engagements, {})
    assert len(shares) == 5
    assert shares[0].percentage == 10.0
    assert risk is False

    shares, risk = calculate_client_concentration(engagements[:3], {"client-0": "Zero"})
    assert shares[0].name == "Zero"
    assert risk is True


def test_low_margin_alerts_skip_zero_and_negative() -> None:
    engagements = [
        _engagement("thin", "client-1", 1000),
        _engagement("healthy", "client-1", 1000),
        _engagement("underwater", "client-1", 1000),
    ]
    assignments = {
        "thin": [_fixed("a-1", "thin", 800)],
        "healthy": [_fixed("a-2", "healthy", 200)],
        "underwater": [_fixed("a-3", "underwater", 1500)],
    }
    flagged = find_low_margin_engagements(engagements, assignments, {"client-1": "Acme"}, threshold=30.0)
    assert [(item.engagement_id, item.margin, item.client_name) for item in flagged] == [("thin", 20.0, "Acme")]


def test_ending_contracts_window() -> None:
    engagements = [
        _engagement("soon", "client-1", 100, end_date="2025-03-11"),
        _engagement("today", "client-1", 100, end_date="2025-03-01"),
        _engagement("far", "client-1", 100, end_date="2025-04-30"),
        _engagement("open", "client-1", 100),
    ]
    ending = find_ending_contracts(engagements, {}, today=date(2025, 3, 1), within_days=60)
    assert [(item.engagement_id, item.days_left) for item in ending] == [("soon", 10)]


def test_overview_compares_with_previous_period() -> None:
    engagements = [
        _engagement("eng-1", "client-1", 1000),
        _engagement("eng-2", "client-2", 500, start_date="2024-03-01"),
    ]
    assignments = [_fixed("a-1", "eng-1", 400), _fixed("a-2", "eng-2", 100)]
    overview = build_revenue_overview(
        month_range(2024, 3),
        month_range(2024, 2),
        CLIENTS,
        engagements,
        assignments,
        today=date(2024, 3, 15),
    )
    assert overview.mrr == 1500.0
    assert overview.previous_mrr == 1000.0
    assert overview.mrr_change_pct == 50.0
    assert overview.arr == 18000.0
    assert overview.average_margin == 70.0
    assert overview.active_clients == 3
    assert [share.name for share in overview.client_concentration] == ["Acme", "Beta"]
    assert overview.mrr_trend[-1].period_start == date(2024, 3, 1)
    assert overview.mrr_trend[-1].mrr == 1500.0


def test_overview_with_no_previous_revenue() -> None:
    overview = build_revenue_overview(
        month_range(2024, 1),
        month_range(2023, 12),
        CLIENTS,
        [_engagement("eng-1", "client-1", 1000)],
        [],
        today=date(2024, 1, 10),
    )
    assert overview.previous_mrr == 0.0
    assert overview.mrr_change_pct == 0.0
    assert overview.average_margin == 100.0


def test_client_history_tracks_new_and_lost_clients() -> None:
    engagements = [
        _engagement("eng-1", "client-1", 1000),
        _engagement("eng-2", "client-2", 1500, start_date="2024-03-01"),
        _engagement("eng-3", "client-3", 700, status="completed", end_date="2024-04-30"),
        _engagement("orphan", "client-missing", 900),
    ]
    history = build_client_history(2024, 4, CLIENTS, engagements)
    assert [row.client_id for row in history.active_clients] == ["client-2", "client-1", "client-3"]
    assert history.mrr == 3200.0
    assert history.new_clients == []
    assert [row.client_id for row in history.lost_clients] == ["client-3"]
    assert [point.active_clients for point in history.yearly_active_counts][:5] == [2, 2, 3, 3, 2]

    march = build_client_history(2024, 3, CLIENTS, engagements)
    assert [row.name for row in march.new_clients] == ["Beta"]
