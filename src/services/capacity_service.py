from __future__ import annotations

import logging
from typing import List

from src.analytics.capacity import calculate_free_capacity, project_team_capacity
from src.analytics.periods import month_range, resolve_period
from src.core.config import get_settings
from src.core.errors import BadRequestError, NotFoundError
from src.repositories.crm_repository import CrmRepository
from src.repositories.planned_engagements_repository import PlannedEngagementsRepository
from src.schemas.capacity import (
    CapacityForecastFilters,
    PlannedEngagement,
    PlannedEngagementCreateRequest,
    PlannedEngagementFilters,
    TeamCapacityForecast,
)
from src.services.snapshot import load_or_empty


logger = logging.getLogger(__name__)


class CapacityService:
    def __init__(
        self,
        crm_repository: CrmRepository,
        planned_repository: PlannedEngagementsRepository,
    ) -> None:
        self.crm_repository = crm_repository
        self.planned_repository = planned_repository
        self.settings = get_settings()

    def get_forecast(self, filters: CapacityForecastFilters) -> TeamCapacityForecast:
        period = month_range(filters.year, filters.month)
        colleagues = load_or_empty(self.crm_repository.list_colleagues, "colleagues")
        assignments = load_or_empty(self.crm_repository.list_assignments, "assignments")
        engagements = load_or_empty(self.crm_repository.list_engagements, "engagements")
        planned = load_or_empty(
            lambda: self.planned_repository.list_planned(period.start, period.end),
            "planned engagements",
        )
        projections = project_team_capacity(
            filters.year,
            filters.month,
            colleagues,
            assignments,
            engagements,
            planned,
            position_keywords=self.settings.capacity_position_keywords,
            default_slots=self.settings.capacity_default_slots,
            fallback_slot=self.settings.capacity_fallback_slot,
            attribution=filters.attribution,
        )
        return TeamCapacityForecast(
            year=filters.year,
            month=filters.month,
            period_start=period.start,
            period_end=period.end,
            attribution=filters.attribution,
            colleagues=projections,
            free_capacity=calculate_free_capacity(
                projections, tuple(self.settings.capacity_default_slots)
            ),
        )

    def list_planned(self, filters: PlannedEngagementFilters) -> List[PlannedEngagement]:
        start_date = end_date = None
        if filters.year is not None:
            if filters.month is not None:
                window = month_range(filters.year, filters.month)
            else:
                window = resolve_period("year", filters.year)
            start_date, end_date = window.start, window.end
        records = self.planned_repository.list_planned(start_date, end_date)
        return [PlannedEngagement.model_validate(record.model_dump()) for record in records]

    def create_planned(self, payload: PlannedEngagementCreateRequest) -> PlannedEngagement:
        colleague_ids = list(dict.fromkeys(payload.assigned_colleague_ids))
        if not colleague_ids:
            raise BadRequestError(
                "A planned engagement needs at least one assigned colleague",
                details={"field": "assignedColleagueIds"},
            )
        record = self.planned_repository.create_planned(
            {
                "name": payload.name,
                "client_name": payload.client_name,
                "lead_id": payload.lead_id,
                "monthly_fee": payload.monthly_fee,
                "start_date": payload.start_date.isoformat(),
                "assigned_colleague_ids": colleague_ids,
                "notes": payload.notes,
                "probability_percent": payload.probability_percent,
            }
        )
        logger.info("Planned engagement %s created for %d colleagues", record.id, len(colleague_ids))
        return PlannedEngagement.model_validate(record.model_dump())

    def delete_planned(self, planned_id: str) -> str:
        if not self.planned_repository.delete_planned(planned_id):
            raise NotFoundError(f"Planned engagement {planned_id} not found")
        return planned_id
