from __future__ import annotations

from typing import List

from pydantic import ConfigDict, Field

from src.shared.base import BaseSchema


class TeamEarningsFilters(BaseSchema):
    # Keep query parameter names in snake_case for API contract consistency.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)


class MonthlyEarnings(BaseSchema):
    year: int
    month: int
    fixed_earnings: float
    creative_boost_credits: float = 0.0
    creative_boost_reward: float = 0.0
    commissions_reward: float = 0.0
    commissions_count: int = 0
    activities_reward: float
    activities_count: int
    total_earnings: float


class ColleagueEarnings(BaseSchema):
    colleague_id: str
    full_name: str
    engagement_count: int
    fixed_earnings: float
    creative_boost_credits: float = 0.0
    creative_boost_reward: float = 0.0
    commissions_reward: float = 0.0
    commissions_count: int = 0
    activities_reward: float
    activities_count: int
    total_earnings: float


class TeamEarningsResponse(BaseSchema):
    year: int
    month: int
    colleagues: List[ColleagueEarnings]
    team_total: float
    average_per_colleague: float


class ColleagueEarningsHistory(BaseSchema):
    colleague_id: str
    full_name: str
    months: List[MonthlyEarnings]
