from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_revenue_service
from src.api.periods import get_period_filters
from src.schemas.revenue import (
    ClientHistoryFilters,
    ClientHistoryResponse,
    PeriodFilters,
    RevenueOverview,
)
from src.services.revenue_service import RevenueService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/revenue", tags=["revenue"])


def get_client_history_filters(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
) -> ClientHistoryFilters:
    today = date.today()
    return ClientHistoryFilters(
        year=year if year is not None else today.year,
        month=month if month is not None else today.month,
    )


@router.get("/overview")
def revenue_overview(
    filters: PeriodFilters = Depends(get_period_filters),
    service: RevenueService = Depends(get_revenue_service),
) -> ResponseEnvelope[RevenueOverview]:
    today = date.today()
    data = service.get_overview(filters, today)
    meta = build_meta(
        today,
        "clients,engagements,engagement_assignments",
        period_mode=filters.period_mode,
        period_start=data.period_start,
        period_end=data.period_end,
    )
    return ResponseEnvelope(data=data, pagination=None, meta=meta)


@router.get("/client-history")
def revenue_client_history(
    filters: ClientHistoryFilters = Depends(get_client_history_filters),
    service: RevenueService = Depends(get_revenue_service),
) -> ResponseEnvelope[ClientHistoryResponse]:
    data = service.get_client_history(filters)
    meta = build_meta(date.today(), "clients,engagements", period_mode="month")
    return ResponseEnvelope(data=data, pagination=None, meta=meta)
