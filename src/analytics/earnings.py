from __future__ import annotations

from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from src.analytics.aggregation import RecordGroup, assignment_monthly_cost, group_records, safe_divide
from src.analytics.membership import overlaps
from src.analytics.periods import month_range
from src.models.crm import (
    ActivityRewardRecord,
    AssignmentRecord,
    ColleagueRecord,
    CreativeOutputRecord,
    EngagementRecord,
    UpsellCommissionRecord,
)
from src.schemas.earnings import ColleagueEarnings, MonthlyEarnings, TeamEarningsResponse
from src.shared.time import add_months


EXPRESS_CREDIT_MULTIPLIER = 1.5
DEFAULT_REWARD_PER_CREDIT = 80.0

MonthKey = Tuple[Optional[str], int, int]


def calculate_output_credits(normal_count: int, express_count: int, base_credits: float) -> Tuple[float, float, float]:
    """Normal, express and total credits for one output row."""
    normal = normal_count * base_credits
    express = express_count * base_credits * EXPRESS_CREDIT_MULTIPLIER
    return normal, express, normal + express


def _output_credits(output: CreativeOutputRecord) -> float:
    return calculate_output_credits(output.normal_count, output.express_count, output.base_credits)[2]


def _output_reward(output: CreativeOutputRecord) -> float:
    rate = output.reward_per_credit if output.reward_per_credit is not None else DEFAULT_REWARD_PER_CREDIT
    return _output_credits(output) * rate


def group_creative_outputs(
    outputs: Sequence[CreativeOutputRecord],
) -> Dict[MonthKey, RecordGroup[MonthKey, CreativeOutputRecord]]:
    return group_records(
        outputs,
        key_fn=lambda output: (output.colleague_id, output.year, output.month),
        extractors={"credits": _output_credits, "reward": _output_reward},
    )


def group_commissions(
    commissions: Sequence[UpsellCommissionRecord],
) -> Dict[MonthKey, RecordGroup[MonthKey, UpsellCommissionRecord]]:
    dated = [commission for commission in commissions if commission.commission_date is not None]
    return group_records(
        dated,
        key_fn=lambda commission: (
            commission.colleague_id,
            commission.commission_date.year,
            commission.commission_date.month,
        ),
        extractors={"commission": lambda commission: commission.commission},
    )


def service_commission_date(
    billing_type: Optional[str], effective_from: Optional[date], created_at: Optional[date]
) -> Optional[date]:
    """Month a sold service pays its commission in.

    One-off services count when created. Recurring ones count from the month
    they take effect; a start after the 1st rolls over to the next month.
    """
    if billing_type == "one_off" or effective_from is None:
        return created_at
    if effective_from.day == 1:
        return effective_from
    return add_months(effective_from, 1)


def paid_assignments(
    colleague_id: str,
    year: int,
    month: int,
    assignments: Sequence[AssignmentRecord],
    engagements_by_id: Mapping[str, EngagementRecord],
) -> List[AssignmentRecord]:
    """Assignments of the colleague running in the month on an active engagement.

    An assignment without a start date is paid from the start of any month.
    """
    period = month_range(year, month)
    paid: List[AssignmentRecord] = []
    for assignment in assignments:
        if assignment.colleague_id != colleague_id:
            continue
        if not overlaps(assignment.start_date or period.start, assignment.end_date, period):
            continue
        engagement = engagements_by_id.get(assignment.engagement_id)
        if engagement is not None and engagement.status == "active":
            paid.append(assignment)
    return paid


def calculate_monthly_earnings(
    colleague_id: str,
    year: int,
    month: int,
    assignments: Sequence[AssignmentRecord],
    engagements_by_id: Mapping[str, EngagementRecord],
    rewards: Sequence[ActivityRewardRecord],
    outputs: Sequence[CreativeOutputRecord] = (),
    commissions: Sequence[UpsellCommissionRecord] = (),
) -> MonthlyEarnings:
    period = month_range(year, month)
    fixed = sum(
        assignment_monthly_cost(assignment, engagements_by_id.get(assignment.engagement_id))
        for assignment in paid_assignments(colleague_id, year, month, assignments, engagements_by_id)
    )
    month_rewards = [
        reward
        for reward in rewards
        if reward.colleague_id == colleague_id
        and reward.activity_date is not None
        and period.contains(reward.activity_date)
    ]
    activities = sum(reward.amount for reward in month_rewards)

    key = (colleague_id, year, month)
    boost = group_creative_outputs(outputs).get(key)
    boost_totals = boost.totals if boost else {"credits": 0.0, "reward": 0.0}
    sold = group_commissions(commissions).get(key)
    commissions_reward = sold.totals["commission"] if sold else 0.0

    total = fixed + boost_totals["reward"] + commissions_reward + activities
    return MonthlyEarnings(
        year=year,
        month=month,
        fixed_earnings=round(fixed, 2),
        creative_boost_credits=round(boost_totals["credits"], 2),
        creative_boost_reward=round(boost_totals["reward"], 2),
        commissions_reward=round(commissions_reward, 2),
        commissions_count=sold.count if sold else 0,
        activities_reward=round(activities, 2),
        activities_count=len(month_rewards),
        total_earnings=round(total, 2),
    )


def build_team_earnings(
    year: int,
    month: int,
    colleagues: Sequence[ColleagueRecord],
    assignments: Sequence[AssignmentRecord],
    engagements: Sequence[EngagementRecord],
    rewards: Sequence[ActivityRewardRecord],
    outputs: Sequence[CreativeOutputRecord] = (),
    commissions: Sequence[UpsellCommissionRecord] = (),
) -> TeamEarningsResponse:
    engagements_by_id = {engagement.id: engagement for engagement in engagements}
    rows: List[ColleagueEarnings] = []
    for colleague in colleagues:
        if colleague.status != "active":
            continue
        monthly = calculate_monthly_earnings(
            colleague.id, year, month, assignments, engagements_by_id, rewards, outputs, commissions
        )
        engagement_ids = {
            assignment.engagement_id
            for assignment in paid_assignments(colleague.id, year, month, assignments, engagements_by_id)
        }
        rows.append(
            ColleagueEarnings(
                colleague_id=colleague.id,
                full_name=colleague.full_name,
                engagement_count=len(engagement_ids),
                **monthly.model_dump(exclude={"year", "month"}),
            )
        )
    rows.sort(key=lambda row: row.total_earnings, reverse=True)
    team_total = round(sum(row.total_earnings for row in rows), 2)
    return TeamEarningsResponse(
        year=year,
        month=month,
        colleagues=rows,
        team_total=team_total,
        average_per_colleague=round(safe_divide(team_total, len(rows)), 2),
    )


def build_earnings_history(
    colleague_id: str,
    as_of: date,
    months_back: int,
    assignments: Sequence[AssignmentRecord],
    engagements: Sequence[EngagementRecord],
    rewards: Sequence[ActivityRewardRecord],
    outputs: Sequence[CreativeOutputRecord] = (),
    commissions: Sequence[UpsellCommissionRecord] = (),
) -> List[MonthlyEarnings]:
    """Most recent month first, like the earnings sheet lists them."""
    engagements_by_id = {engagement.id: engagement for engagement in engagements}
    history: List[MonthlyEarnings] = []
    for offset in range(months_back):
        month_start = add_months(as_of, -offset)
        history.append(
            calculate_monthly_earnings(
                colleague_id,
                month_start.year,
                month_start.month,
                assignments,
                engagements_by_id,
                rewards,
                outputs,
                commissions,
            )
        )
    return history
