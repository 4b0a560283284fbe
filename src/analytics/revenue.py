from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Collection, Dict, List, Mapping, Sequence

from src.analytics.aggregation import (
    assignment_monthly_cost,
    group_records,
    safe_divide,
    sum_field,
)
from src.analytics.membership import ACTIVE_LIKE_STATUSES, filter_active, overlaps
from src.analytics.periods import TimeRange, month_range, trailing_months
from src.models.crm import AssignmentRecord, ClientRecord, EngagementRecord
from src.schemas.revenue import (
    ActiveClientSummary,
    ClientHistoryResponse,
    ClientReference,
    ClientRevenueShare,
    EndingContract,
    LowMarginEngagement,
    MonthlyClientCount,
    MrrTrendPoint,
    RevenueOverview,
)


# The overview counts only running retainers; client history also keeps completed ones.
MRR_STATUSES = frozenset({"active"})
CONCENTRATION_TOP_N = 5
CONCENTRATION_RISK_SHARE = 0.5


def calculate_mrr(
    engagements: Sequence[EngagementRecord],
    period: TimeRange,
    statuses: Collection[str] = MRR_STATUSES,
) -> float:
    active = filter_active(engagements, period, statuses)
    return sum_field(active, lambda engagement: engagement.monthly_fee)


def active_clients_in(clients: Sequence[ClientRecord], period: TimeRange) -> List[ClientRecord]:
    """Clients with a contract range touching ``period``; undated clients count when active."""
    active: List[ClientRecord] = []
    for client in clients:
        if client.start_date is None:
            if client.status == "active":
                active.append(client)
        elif overlaps(client.start_date, client.end_date, period):
            active.append(client)
    return active


def group_assignments_by_engagement(
    assignments: Sequence[AssignmentRecord],
) -> Dict[str, List[AssignmentRecord]]:
    grouped: Dict[str, List[AssignmentRecord]] = defaultdict(list)
    for assignment in assignments:
        grouped[assignment.engagement_id].append(assignment)
    return grouped


def calculate_engagement_margin(
    engagement: EngagementRecord, assignments: Sequence[AssignmentRecord]
) -> float:
    if engagement.monthly_fee <= 0:
        return 0.0
    cost = sum(assignment_monthly_cost(assignment, engagement) for assignment in assignments)
    return (engagement.monthly_fee - cost) / engagement.monthly_fee * 100


def calculate_average_margin(
    engagements: Sequence[EngagementRecord],
    assignments_by_engagement: Mapping[str, Sequence[AssignmentRecord]],
) -> float:
    margins = [
        calculate_engagement_margin(engagement, assignments_by_engagement.get(engagement.id, []))
        for engagement in engagements
    ]
    return safe_divide(sum(margins), len(margins))


def calculate_client_concentration(
    active_engagements: Sequence[EngagementRecord],
    client_names: Mapping[str, str],
    top_n: int = CONCENTRATION_TOP_N,
) -> tuple[List[ClientRevenueShare], bool]:
    total = sum_field(active_engagements, lambda engagement: engagement.monthly_fee)
    groups = group_records(
        active_engagements,
        key_fn=lambda engagement: engagement.client_id,
        extractors={"revenue": lambda engagement: engagement.monthly_fee},
        sort_by="revenue",
    )
    shares = [
        ClientRevenueShare(
            client_id=client_id,
            name=client_names.get(client_id, client_id),
            revenue=group.totals["revenue"],
            percentage=round(safe_divide(group.totals["revenue"], total) * 100, 2),
        )
        for client_id, group in list(groups.items())[:top_n]
    ]
    top_revenue = sum(share.revenue for share in shares)
    return shares, safe_divide(top_revenue, total) > CONCENTRATION_RISK_SHARE


def calculate_mrr_trend(
    engagements: Sequence[EngagementRecord],
    assignments_by_engagement: Mapping[str, Sequence[AssignmentRecord]],
    anchor: date,
    months: int = 12,
) -> List[MrrTrendPoint]:
    points: List[MrrTrendPoint] = []
    for period in trailing_months(anchor, months):
        month_engagements = filter_active(engagements, period, MRR_STATUSES)
        points.append(
            MrrTrendPoint(
                period_start=period.start,
                mrr=sum_field(month_engagements, lambda engagement: engagement.monthly_fee),
                average_margin=round(
                    calculate_average_margin(month_engagements, assignments_by_engagement), 2
                ),
            )
        )
    return points


def find_low_margin_engagements(
    active_engagements: Sequence[EngagementRecord],
    assignments_by_engagement: Mapping[str, Sequence[AssignmentRecord]],
    client_names: Mapping[str, str],
    threshold: float = 30.0,
) -> List[LowMarginEngagement]:
    flagged: List[LowMarginEngagement] = []
    for engagement in active_engagements:
        margin = calculate_engagement_margin(
            engagement, assignments_by_engagement.get(engagement.id, [])
        )
        if 0 < margin < threshold:
            flagged.append(
                LowMarginEngagement(
                    engagement_id=engagement.id,
                    name=engagement.name,
                    client_name=client_names.get(engagement.client_id, ""),
                    margin=round(margin, 2),
                )
            )
    return sorted(flagged, key=lambda item: item.margin)


def find_ending_contracts(
    active_engagements: Sequence[EngagementRecord],
    client_names: Mapping[str, str],
    today: date,
    within_days: int = 60,
) -> List[EndingContract]:
    ending: List[EndingContract] = []
    for engagement in active_engagements:
        if engagement.end_date is None:
            continue
        days_left = (engagement.end_date - today).days
        if 0 < days_left < within_days:
            ending.append(
                EndingContract(
                    engagement_id=engagement.id,
                    client_name=client_names.get(engagement.client_id, engagement.name),
                    end_date=engagement.end_date,
                    days_left=days_left,
                )
            )
    return sorted(ending, key=lambda item: item.days_left)


def build_revenue_overview(
    period: TimeRange,
    comparison: TimeRange,
    clients: Sequence[ClientRecord],
    engagements: Sequence[EngagementRecord],
    assignments: Sequence[AssignmentRecord],
    today: date,
    margin_threshold: float = 30.0,
    ending_window_days: int = 60,
) -> RevenueOverview:
    client_names = {client.id: client.display_name for client in clients}
    assignments_by_engagement = group_assignments_by_engagement(assignments)
    active_engagements = filter_active(engagements, period, MRR_STATUSES)

    mrr = sum_field(active_engagements, lambda engagement: engagement.monthly_fee)
    previous_mrr = calculate_mrr(engagements, comparison)
    concentration, concentration_risk = calculate_client_concentration(
        active_engagements, client_names
    )

    return RevenueOverview(
        period_start=period.start,
        period_end=period.end,
        comparison_start=comparison.start,
        comparison_end=comparison.end,
        active_clients=len(active_clients_in(clients, period)),
        active_engagements=len(active_engagements),
        mrr=mrr,
        previous_mrr=previous_mrr,
        mrr_change_pct=round(safe_divide(mrr - previous_mrr, previous_mrr) * 100, 2),
        arr=mrr * 12,
        average_margin=round(
            calculate_average_margin(active_engagements, assignments_by_engagement), 2
        ),
        client_concentration=concentration,
        concentration_risk=concentration_risk,
        mrr_trend=calculate_mrr_trend(engagements, assignments_by_engagement, period.start),
        low_margin_engagements=find_low_margin_engagements(
            active_engagements, assignments_by_engagement, client_names, margin_threshold
        ),
        ending_contracts=find_ending_contracts(
            active_engagements, client_names, today, ending_window_days
        ),
    )


def active_clients_by_mrr(
    engagements: Sequence[EngagementRecord],
    clients: Sequence[ClientRecord],
    period: TimeRange,
) -> List[ActiveClientSummary]:
    """Clients with an active-like engagement in ``period``, highest MRR first."""
    clients_by_id = {client.id: client for client in clients}
    active = [
        engagement
        for engagement in filter_active(engagements, period, ACTIVE_LIKE_STATUSES)
        if engagement.client_id in clients_by_id
    ]
    groups = group_records(
        active,
        key_fn=lambda engagement: engagement.client_id,
        extractors={"monthly_fee": lambda engagement: engagement.monthly_fee},
        sort_by="monthly_fee",
    )
    return [
        ActiveClientSummary(
            client_id=client_id,
            name=clients_by_id[client_id].display_name,
            engagement_ids=[engagement.id for engagement in group.records],
            total_monthly_fee=group.totals["monthly_fee"],
        )
        for client_id, group in groups.items()
    ]


def clients_started_in(clients: Sequence[ClientRecord], period: TimeRange) -> List[ClientReference]:
    return [
        ClientReference(client_id=client.id, name=client.display_name, change_date=client.start_date)
        for client in clients
        if client.start_date and period.contains(client.start_date)
    ]


def clients_ended_in(clients: Sequence[ClientRecord], period: TimeRange) -> List[ClientReference]:
    return [
        ClientReference(client_id=client.id, name=client.display_name, change_date=client.end_date)
        for client in clients
        if client.end_date and period.contains(client.end_date)
    ]


def yearly_active_client_counts(
    engagements: Sequence[EngagementRecord],
    clients: Sequence[ClientRecord],
    year: int,
) -> List[MonthlyClientCount]:
    return [
        MonthlyClientCount(
            period_start=date(year, month, 1),
            active_clients=len(active_clients_by_mrr(engagements, clients, month_range(year, month))),
        )
        for month in range(1, 13)
    ]


def build_client_history(
    year: int,
    month: int,
    clients: Sequence[ClientRecord],
    engagements: Sequence[EngagementRecord],
) -> ClientHistoryResponse:
    period = month_range(year, month)
    active = active_clients_by_mrr(engagements, clients, period)
    return ClientHistoryResponse(
        year=year,
        month=month,
        mrr=sum(summary.total_monthly_fee for summary in active),
        active_clients=active,
        new_clients=clients_started_in(clients, period),
        lost_clients=clients_ended_in(clients, period),
        yearly_active_counts=yearly_active_client_counts(engagements, clients, year),
    )
