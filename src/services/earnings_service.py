from __future__ import annotations

from datetime import date

from src.analytics.earnings import build_earnings_history, build_team_earnings
from src.core.errors import NotFoundError
from src.repositories.activity_rewards_repository import ActivityRewardsRepository
from src.repositories.creative_boost_repository import CreativeBoostRepository
from src.repositories.crm_repository import CrmRepository
from src.repositories.upsell_commissions_repository import UpsellCommissionsRepository
from src.schemas.earnings import (
    ColleagueEarningsHistory,
    TeamEarningsFilters,
    TeamEarningsResponse,
)
from src.services.snapshot import load_or_empty


class EarningsService:
    def __init__(
        self,
        crm_repository: CrmRepository,
        rewards_repository: ActivityRewardsRepository,
        creative_boost_repository: CreativeBoostRepository,
        commissions_repository: UpsellCommissionsRepository,
    ) -> None:
        self.crm_repository = crm_repository
        self.rewards_repository = rewards_repository
        self.creative_boost_repository = creative_boost_repository
        self.commissions_repository = commissions_repository

    def get_team_earnings(self, filters: TeamEarningsFilters) -> TeamEarningsResponse:
        return build_team_earnings(
            filters.year,
            filters.month,
            colleagues=load_or_empty(self.crm_repository.list_colleagues, "colleagues"),
            assignments=load_or_empty(self.crm_repository.list_assignments, "assignments"),
            engagements=load_or_empty(self.crm_repository.list_engagements, "engagements"),
            rewards=load_or_empty(self.rewards_repository.list_rewards, "activity rewards"),
            outputs=load_or_empty(self.creative_boost_repository.list_outputs, "creative boost outputs"),
            commissions=load_or_empty(self.commissions_repository.list_approved, "upsell commissions"),
        )

    def get_history(self, colleague_id: str, months: int, today: date) -> ColleagueEarningsHistory:
        colleague = self.crm_repository.get_colleague(colleague_id)
        if colleague is None:
            raise NotFoundError(f"Colleague {colleague_id} not found")
        history = build_earnings_history(
            colleague_id,
            today,
            months,
            assignments=load_or_empty(self.crm_repository.list_assignments, "assignments"),
            engagements=load_or_empty(self.crm_repository.list_engagements, "engagements"),
            rewards=load_or_empty(
                lambda: self.rewards_repository.list_rewards(colleague_id), "activity rewards"
            ),
            outputs=load_or_empty(
                lambda: self.creative_boost_repository.list_outputs(colleague_id), "creative boost outputs"
            ),
            commissions=load_or_empty(
                lambda: self.commissions_repository.list_approved(colleague_id), "upsell commissions"
            ),
        )
        return ColleagueEarningsHistory(
            colleague_id=colleague.id, full_name=colleague.full_name, months=history
        )
