from __future__ import annotations

from datetime import date
from typing import Dict, List

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_capacity_service
from src.schemas.capacity import (
    PlannedEngagement,
    PlannedEngagementCreateRequest,
    PlannedEngagementFilters,
)
from src.services.capacity_service import CapacityService
from src.shared.response import ResponseEnvelope, build_meta, paginate_list

router = APIRouter(prefix="/planned-engagements", tags=["planned-engagements"])


def get_planned_engagement_filters(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
) -> PlannedEngagementFilters:
    return PlannedEngagementFilters(year=year, month=month)


@router.get("")
def planned_engagements_list(
    filters: PlannedEngagementFilters = Depends(get_planned_engagement_filters),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    service: CapacityService = Depends(get_capacity_service),
) -> ResponseEnvelope[List[PlannedEngagement]]:
    items, pagination = paginate_list(service.list_planned(filters), page, page_size)
    return ResponseEnvelope(
        data=items, pagination=pagination, meta=build_meta(date.today(), "planned_engagements")
    )


@router.post("")
def planned_engagement_create(
    request: PlannedEngagementCreateRequest,
    service: CapacityService = Depends(get_capacity_service),
) -> ResponseEnvelope[PlannedEngagement]:
    created = service.create_planned(request)
    return ResponseEnvelope(data=created, pagination=None, meta=build_meta(date.today(), "planned_engagements"))


@router.delete("/{planned_id}")
def planned_engagement_delete(
    planned_id: str,
    service: CapacityService = Depends(get_capacity_service),
) -> ResponseEnvelope[Dict[str, str]]:
    deleted_id = service.delete_planned(planned_id)
    return ResponseEnvelope(
        data={"id": deleted_id}, pagination=None, meta=build_meta(date.today(), "planned_engagements")
    )
