from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from src.analytics.periods import resolve_period
from src.api.dependencies import get_funnel_service
from src.api.periods import get_period_filters
from src.schemas.funnel import (
    FunnelFilters,
    FunnelPassthroughSummary,
    LeadSourceResponse,
    StageTransition,
    StageTransitionCreateRequest,
)
from src.schemas.revenue import PeriodFilters
from src.services.funnel_service import FunnelService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/funnel", tags=["funnel"])


def get_funnel_filters(
    trend_months: int | None = Query(default=None, ge=1, le=36),
) -> FunnelFilters:
    return FunnelFilters(trend_months=trend_months)


@router.get("/passthrough")
def funnel_passthrough(
    filters: FunnelFilters = Depends(get_funnel_filters),
    service: FunnelService = Depends(get_funnel_service),
) -> ResponseEnvelope[FunnelPassthroughSummary]:
    today = date.today()
    data = service.get_passthrough(filters, today)
    meta = build_meta(today, "leads,lead_stage_transitions")
    return ResponseEnvelope(data=data, pagination=None, meta=meta)


@router.get("/sources")
def funnel_sources(
    filters: PeriodFilters = Depends(get_period_filters),
    service: FunnelService = Depends(get_funnel_service),
) -> ResponseEnvelope[LeadSourceResponse]:
    today = date.today()
    period = resolve_period(filters.period_mode, filters.year, filters.month, filters.quarter, today)
    data = service.get_sources(period)
    meta = build_meta(
        today,
        "leads",
        period_mode=filters.period_mode,
        period_start=period.start,
        period_end=period.end,
    )
    return ResponseEnvelope(data=data, pagination=None, meta=meta)


@router.post("/transitions")
def funnel_transition_create(
    request: StageTransitionCreateRequest,
    service: FunnelService = Depends(get_funnel_service),
) -> ResponseEnvelope[StageTransition]:
    today = date.today()
    created = service.record_transition(request, today)
    return ResponseEnvelope(data=created, pagination=None, meta=build_meta(today, "lead_stage_transitions"))
