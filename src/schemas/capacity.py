from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field

from src.shared.base import BaseSchema


class CapacityForecastFilters(BaseSchema):
    # Keep query parameter names in snake_case for API contract consistency.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    attribution: str = Field(default="primary", pattern="^(primary|per_assignment)$")


class SlotUtilization(BaseSchema):
    slot_type: str
    capacity: int
    current: int
    after_endings: int
    after_new: int
    projected_ratio: float


class CapacityEvent(BaseSchema):
    event_date: date
    type: str = Field(..., pattern="^(freed|filled)$")
    name: str
    slot_type: str


class ColleagueCapacityProjection(BaseSchema):
    colleague_id: str
    full_name: str
    primary_slot_type: str
    slots: Dict[str, int]
    slot_utilization: List[SlotUtilization]
    current: int
    after_endings: int
    after_new: int
    utilization_ratio: float
    events: List[CapacityEvent]
    has_changes: bool


class TeamCapacityForecast(BaseSchema):
    year: int
    month: int
    period_start: date
    period_end: date
    attribution: str
    colleagues: List[ColleagueCapacityProjection]
    free_capacity: Dict[str, int]


class PlannedEngagement(BaseSchema):
    id: str
    name: str
    client_name: str
    lead_id: Optional[str] = None
    monthly_fee: float
    start_date: Optional[date] = None
    assigned_colleague_ids: List[str]
    notes: str = ""
    probability_percent: int
    created_at: Optional[date] = None


class PlannedEngagementCreateRequest(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(..., min_length=1)
    client_name: str = ""
    lead_id: Optional[str] = None
    monthly_fee: float = Field(default=0.0, ge=0.0)
    start_date: date
    assigned_colleague_ids: List[str] = Field(default_factory=list)
    notes: str = ""
    probability_percent: int = Field(default=100, ge=0, le=100)


class PlannedEngagementFilters(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)
