from __future__ import annotations

from datetime import date
from typing import List

from pydantic import ConfigDict, Field

from src.shared.base import BaseSchema


class PeriodFilters(BaseSchema):
    # Keep query parameter names in snake_case for API contract consistency.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    period_mode: str = Field(default="month", pattern="^(month|quarter|ytd|year|last_year)$")
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(default=1, ge=1, le=12)
    quarter: int = Field(default=1, ge=1, le=4)


class ResolvedPeriod(BaseSchema):
    period_mode: str
    label: str
    period_start: date
    period_end: date
    comparison_start: date
    comparison_end: date


class ClientRevenueShare(BaseSchema):
    client_id: str
    name: str
    revenue: float
    percentage: float


class MrrTrendPoint(BaseSchema):
    period_start: date
    mrr: float
    average_margin: float


class LowMarginEngagement(BaseSchema):
    engagement_id: str
    name: str
    client_name: str
    margin: float


class EndingContract(BaseSchema):
    engagement_id: str
    client_name: str
    end_date: date
    days_left: int


class RevenueOverview(BaseSchema):
    period_start: date
    period_end: date
    comparison_start: date
    comparison_end: date
    active_clients: int
    active_engagements: int
    mrr: float
    previous_mrr: float
    mrr_change_pct: float
    arr: float
    average_margin: float
    client_concentration: List[ClientRevenueShare]
    concentration_risk: bool
    mrr_trend: List[MrrTrendPoint]
    low_margin_engagements: List[LowMarginEngagement]
    ending_contracts: List[EndingContract]


class ActiveClientSummary(BaseSchema):
    client_id: str
    name: str
    engagement_ids: List[str]
    total_monthly_fee: float


class ClientReference(BaseSchema):
    client_id: str
    name: str
    change_date: date


class MonthlyClientCount(BaseSchema):
    period_start: date
    active_clients: int


class ClientHistoryFilters(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)


class ClientHistoryResponse(BaseSchema):
    year: int
    month: int
    mrr: float
    active_clients: List[ActiveClientSummary]
    new_clients: List[ClientReference]
    lost_clients: List[ClientReference]
    yearly_active_counts: List[MonthlyClientCount]
