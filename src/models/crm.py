from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from pydantic import Field, field_validator

from src.shared.base import RecordModel
from src.shared.time import coerce_date
from src.shared.values import coerce_float


COST_MODEL_FIELDS = {
    "fixed_monthly": "monthly_cost",
    "hourly": "hourly_cost",
    "percentage": "percentage_of_revenue",
}


class ClientRecord(RecordModel):
    id: str
    name: str = ""
    brand_name: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @property
    def display_name(self) -> str:
        return self.brand_name or self.name


class EngagementRecord(RecordModel):
    id: str
    client_id: str
    name: str = ""
    type: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_fee: float = 0.0

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("monthly_fee", mode="before")
    @classmethod
    def _parse_fee(cls, value: Any) -> float:
        return coerce_float(value) or 0.0


class AssignmentRecord(RecordModel):
    id: str
    engagement_id: str
    colleague_id: str
    engagement_service_id: Optional[str] = None
    role_on_engagement: Optional[str] = None
    cost_model: Optional[str] = None
    hourly_cost: Optional[float] = None
    monthly_cost: Optional[float] = None
    percentage_of_revenue: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    # Capacity channel derived from the linked engagement service, when known.
    slot_type: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("hourly_cost", "monthly_cost", "percentage_of_revenue", mode="before")
    @classmethod
    def _parse_costs(cls, value: Any) -> Optional[float]:
        return coerce_float(value)

    @property
    def cost_value(self) -> Optional[float]:
        """The single cost field selected by ``cost_model``."""
        field_name = COST_MODEL_FIELDS.get(self.cost_model or "")
        if field_name is None:
            return None
        return getattr(self, field_name)


class ColleagueRecord(RecordModel):
    id: str
    full_name: str = ""
    position: str = ""
    status: Optional[str] = None
    # Raw JSON from the backend; resolved against defaults by the capacity projector.
    capacity_slots: Any = None

    @field_validator("position", mode="before")
    @classmethod
    def _parse_position(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class PlannedEngagementRecord(RecordModel):
    id: str
    name: str
    client_name: str = ""
    lead_id: Optional[str] = None
    monthly_fee: float = 0.0
    start_date: Optional[date] = None
    assigned_colleague_ids: List[str] = Field(default_factory=list)
    notes: str = ""
    probability_percent: int = 100
    created_at: Optional[date] = None

    @field_validator("start_date", "created_at", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("monthly_fee", mode="before")
    @classmethod
    def _parse_fee(cls, value: Any) -> float:
        return coerce_float(value) or 0.0

    @field_validator("assigned_colleague_ids", mode="before")
    @classmethod
    def _parse_colleague_ids(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item]


class ActivityRewardRecord(RecordModel):
    id: str
    colleague_id: str
    description: str = ""
    billing_type: Optional[str] = None
    amount: float = 0.0
    activity_date: Optional[date] = None

    @field_validator("activity_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> float:
        return coerce_float(value) or 0.0


class CreativeOutputRecord(RecordModel):
    """Monthly creative output counts of one colleague for one client and output type."""

    id: str
    colleague_id: Optional[str] = None
    client_id: Optional[str] = None
    output_type_id: Optional[str] = None
    year: int
    month: int = Field(..., ge=1, le=12)
    normal_count: int = 0
    express_count: int = 0
    base_credits: float = 0.0
    reward_per_credit: Optional[float] = None

    @field_validator("normal_count", "express_count", mode="before")
    @classmethod
    def _parse_counts(cls, value: Any) -> int:
        return max(int(coerce_float(value) or 0), 0)

    @field_validator("base_credits", mode="before")
    @classmethod
    def _parse_credits(cls, value: Any) -> float:
        return coerce_float(value) or 0.0

    @field_validator("reward_per_credit", mode="before")
    @classmethod
    def _parse_reward(cls, value: Any) -> Optional[float]:
        return coerce_float(value)


class UpsellCommissionRecord(RecordModel):
    """An approved upsell (extra work or added service) credited to the colleague who sold it."""

    id: str
    colleague_id: str
    item_type: str
    amount: float = 0.0
    commission_percent: float = 0.0
    commission_date: Optional[date] = None

    @field_validator("commission_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("amount", "commission_percent", mode="before")
    @classmethod
    def _parse_amounts(cls, value: Any) -> float:
        return coerce_float(value) or 0.0

    @property
    def commission(self) -> float:
        return self.amount * self.commission_percent / 100
