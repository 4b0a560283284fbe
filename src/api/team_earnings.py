from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_earnings_service
from src.schemas.earnings import (
    ColleagueEarningsHistory,
    TeamEarningsFilters,
    TeamEarningsResponse,
)
from src.services.earnings_service import EarningsService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/team-earnings", tags=["team-earnings"])

EARNINGS_SOURCE = "colleagues,engagement_assignments,engagements,activity_rewards"


def get_team_earnings_filters(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
) -> TeamEarningsFilters:
    today = date.today()
    return TeamEarningsFilters(
        year=year if year is not None else today.year,
        month=month if month is not None else today.month,
    )


@router.get("")
def team_earnings(
    filters: TeamEarningsFilters = Depends(get_team_earnings_filters),
    service: EarningsService = Depends(get_earnings_service),
) -> ResponseEnvelope[TeamEarningsResponse]:
    data = service.get_team_earnings(filters)
    return ResponseEnvelope(
        data=data, pagination=None, meta=build_meta(date.today(), EARNINGS_SOURCE, period_mode="month")
    )


@router.get("/{colleague_id}/history")
def team_earnings_history(
    colleague_id: str,
    months: int = Query(default=12, ge=1, le=36),
    service: EarningsService = Depends(get_earnings_service),
) -> ResponseEnvelope[ColleagueEarningsHistory]:
    today = date.today()
    data = service.get_history(colleague_id, months, today)
    return ResponseEnvelope(data=data, pagination=None, meta=build_meta(today, EARNINGS_SOURCE))
