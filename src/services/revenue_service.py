from __future__ import annotations

from datetime import date

from src.analytics.periods import period_label, resolve_comparison_period, resolve_period
from src.analytics.revenue import build_client_history, build_revenue_overview
from src.core.config import get_settings
from src.repositories.crm_repository import CrmRepository
from src.schemas.revenue import (
    ClientHistoryFilters,
    ClientHistoryResponse,
    PeriodFilters,
    ResolvedPeriod,
    RevenueOverview,
)
from src.services.snapshot import load_or_empty


class RevenueService:
    def __init__(self, repository: CrmRepository) -> None:
        self.repository = repository
        self.settings = get_settings()

    def resolve(self, filters: PeriodFilters, today: date) -> ResolvedPeriod:
        period = resolve_period(filters.period_mode, filters.year, filters.month, filters.quarter, today)
        comparison = resolve_comparison_period(
            filters.period_mode, filters.year, filters.month, filters.quarter, today
        )
        return ResolvedPeriod(
            period_mode=filters.period_mode,
            label=period_label(filters.period_mode, filters.year, filters.month, filters.quarter, today),
            period_start=period.start,
            period_end=period.end,
            comparison_start=comparison.start,
            comparison_end=comparison.end,
        )

    def get_overview(self, filters: PeriodFilters, today: date) -> RevenueOverview:
        period = resolve_period(filters.period_mode, filters.year, filters.month, filters.quarter, today)
        comparison = resolve_comparison_period(
            filters.period_mode, filters.year, filters.month, filters.quarter, today
        )
        return build_revenue_overview(
            period,
            comparison,
            clients=load_or_empty(self.repository.list_clients, "clients"),
            engagements=load_or_empty(self.repository.list_engagements, "engagements"),
            assignments=load_or_empty(self.repository.list_assignments, "assignments"),
            today=today,
            margin_threshold=self.settings.margin_alert_threshold,
            ending_window_days=self.settings.ending_contract_window_days,
        )

    def get_client_history(self, filters: ClientHistoryFilters) -> ClientHistoryResponse:
        return build_client_history(
            filters.year,
            filters.month,
            clients=load_or_empty(self.repository.list_clients, "clients"),
            engagements=load_or_empty(self.repository.list_engagements, "engagements"),
        )
