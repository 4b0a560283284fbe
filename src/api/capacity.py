from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_capacity_service
from src.schemas.capacity import CapacityForecastFilters, TeamCapacityForecast
from src.services.capacity_service import CapacityService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/capacity", tags=["capacity"])


def get_capacity_forecast_filters(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    attribution: str = Query(default="primary", pattern="^(primary|per_assignment)$"),
) -> CapacityForecastFilters:
    today = date.today()
    return CapacityForecastFilters(
        year=year if year is not None else today.year,
        month=month if month is not None else today.month,
        attribution=attribution,
    )


@router.get("/forecast")
def capacity_forecast(
    filters: CapacityForecastFilters = Depends(get_capacity_forecast_filters),
    service: CapacityService = Depends(get_capacity_service),
) -> ResponseEnvelope[TeamCapacityForecast]:
    data = service.get_forecast(filters)
    meta = build_meta(
        date.today(),
        "colleagues,engagement_assignments,engagements,planned_engagements",
        period_mode="month",
        period_start=data.period_start,
        period_end=data.period_end,
    )
    return ResponseEnvelope(data=data, pagination=None, meta=meta)
