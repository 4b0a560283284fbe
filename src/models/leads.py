from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import field_validator

from src.shared.base import RecordModel
from src.shared.time import coerce_date
from src.shared.values import coerce_float


class StageTransitionRecord(RecordModel):
    id: Optional[str] = None
    lead_id: str
    from_stage: str
    to_stage: str
    transition_value: float = 0.0
    confirmed_at: Optional[date] = None
    confirmed_by: Optional[str] = None

    @field_validator("confirmed_at", mode="before")
    @classmethod
    def _parse_confirmed_at(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("transition_value", mode="before")
    @classmethod
    def _parse_value(cls, value: Any) -> float:
        return coerce_float(value) or 0.0


class NewLeadEntryRecord(RecordModel):
    """One lead in the intake population, whether or not it ever moved stage."""

    lead_id: str
    entered_at: Optional[date] = None
    source: str = "other"
    is_qualified: bool = False
    is_won: bool = False
    value: float = 0.0

    @field_validator("entered_at", mode="before")
    @classmethod
    def _parse_entered_at(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("source", mode="before")
    @classmethod
    def _parse_source(cls, value: Any) -> str:
        return value if isinstance(value, str) and value else "other"

    @field_validator("value", mode="before")
    @classmethod
    def _parse_value(cls, value: Any) -> float:
        return coerce_float(value) or 0.0
