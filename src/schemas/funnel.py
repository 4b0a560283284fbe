from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import ConfigDict, Field

from src.shared.base import BaseSchema


class StageConversionRate(BaseSchema):
    from_stage: str
    to_stage: str
    rate: float = Field(..., ge=0.0, le=100.0)
    count: int
    total: int


class ConversionTrendPoint(BaseSchema):
    period_start: date
    from_stage: str = "new_lead"
    to_stage: str = "won"
    rate: float = Field(..., ge=0.0, le=100.0)
    count: int
    intake: int


class FunnelPassthroughSummary(BaseSchema):
    conversion_rates: List[StageConversionRate]
    overall_conversion: float = Field(..., ge=0.0, le=100.0)
    total_transitions: int
    intake_count: int
    monthly_trend: List[ConversionTrendPoint]


class LeadSourceBreakdown(BaseSchema):
    source: str
    lead_count: int
    qualified_count: int
    won_count: int
    total_value: float
    win_rate: float = Field(..., ge=0.0, le=100.0)


class LeadSourceResponse(BaseSchema):
    period_start: date
    period_end: date
    total_leads: int
    sources: List[LeadSourceBreakdown]


class StageTransition(BaseSchema):
    id: Optional[str] = None
    lead_id: str
    from_stage: str
    to_stage: str
    transition_value: float
    confirmed_at: Optional[date] = None
    confirmed_by: Optional[str] = None


class StageTransitionCreateRequest(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    lead_id: str = Field(..., min_length=1)
    from_stage: str
    to_stage: str
    transition_value: float = Field(default=0.0, ge=0.0)
    confirmed_by: Optional[str] = None


class FunnelFilters(BaseSchema):
    # Keep query parameter names in snake_case for API contract consistency.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    trend_months: Optional[int] = Field(default=None, ge=1, le=36)
