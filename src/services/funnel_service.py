from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from src.analytics.funnel import (
    ALL_STAGES,
    build_funnel_summary,
    calculate_source_breakdown,
    is_valid_transition,
)
from src.analytics.periods import TimeRange
from src.core.config import get_settings
from src.core.errors import BadRequestError
from src.repositories.leads_repository import LeadsRepository
from src.schemas.funnel import (
    FunnelFilters,
    FunnelPassthroughSummary,
    LeadSourceResponse,
    StageTransition,
    StageTransitionCreateRequest,
)
from src.services.snapshot import load_or_empty


class FunnelService:
    def __init__(self, repository: LeadsRepository) -> None:
        self.repository = repository
        self.settings = get_settings()

    def get_passthrough(self, filters: FunnelFilters, today: date) -> FunnelPassthroughSummary:
        transitions = load_or_empty(self.repository.list_transitions, "stage transitions")
        intake = load_or_empty(self.repository.list_intake, "lead intake")
        trend_months = filters.trend_months or self.settings.funnel_trend_months
        return build_funnel_summary(transitions, intake, today, trend_months)

    def get_sources(self, period: TimeRange) -> LeadSourceResponse:
        intake = load_or_empty(self.repository.list_intake, "lead intake")
        sources = calculate_source_breakdown(intake, period)
        return LeadSourceResponse(
            period_start=period.start,
            period_end=period.end,
            total_leads=sum(source.lead_count for source in sources),
            sources=sources,
        )

    def record_transition(
        self, payload: StageTransitionCreateRequest, today: Optional[date] = None
    ) -> StageTransition:
        if not is_valid_transition(payload.from_stage, payload.to_stage):
            raise BadRequestError(
                "Invalid stage transition",
                details={
                    "fromStage": payload.from_stage,
                    "toStage": payload.to_stage,
                    "allowedStages": sorted(ALL_STAGES),
                },
            )
        confirmed_at = today or datetime.now(timezone.utc).date()
        record = self.repository.create_transition(
            {
                "lead_id": payload.lead_id,
                "from_stage": payload.from_stage,
                "to_stage": payload.to_stage,
                "transition_value": payload.transition_value,
                "confirmed_at": confirmed_at.isoformat(),
                "confirmed_by": payload.confirmed_by,
            }
        )
        return StageTransition.model_validate(record.model_dump())
