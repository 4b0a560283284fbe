from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_revenue_service
from src.schemas.revenue import PeriodFilters, ResolvedPeriod
from src.services.revenue_service import RevenueService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/periods", tags=["periods"])


def get_period_filters(
    period_mode: str = Query(default="month", pattern="^(month|quarter|ytd|year|last_year)$"),
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int = Query(default=1, ge=1, le=12),
    quarter: int = Query(default=1, ge=1, le=4),
) -> PeriodFilters:
    return PeriodFilters(
        period_mode=period_mode,
        year=year if year is not None else date.today().year,
        month=month,
        quarter=quarter,
    )


@router.get("/resolve")
def resolve_period_window(
    filters: PeriodFilters = Depends(get_period_filters),
    service: RevenueService = Depends(get_revenue_service),
) -> ResponseEnvelope[ResolvedPeriod]:
    today = date.today()
    data = service.resolve(filters, today)
    meta = build_meta(
        today,
        "system",
        period_mode=filters.period_mode,
        period_start=data.period_start,
        period_end=data.period_end,
    )
    return ResponseEnvelope(data=data, pagination=None, meta=meta)
