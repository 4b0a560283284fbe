from __future__ import annotations

from functools import lru_cache

from src.core.config import get_settings
from src.repositories.activity_rewards_repository import ActivityRewardsRepository
from src.repositories.creative_boost_repository import CreativeBoostRepository
from src.repositories.crm_repository import CrmRepository
from src.repositories.leads_repository import LeadsRepository
from src.repositories.planned_engagements_repository import PlannedEngagementsRepository
from src.repositories.upsell_commissions_repository import UpsellCommissionsRepository
from src.services.capacity_service import CapacityService
from src.services.earnings_service import EarningsService
from src.services.funnel_service import FunnelService
from src.services.revenue_service import RevenueService


@lru_cache
def get_crm_repository() -> CrmRepository:
    return CrmRepository(service_keywords=get_settings().capacity_service_keywords)


@lru_cache
def get_leads_repository() -> LeadsRepository:
    return LeadsRepository()


@lru_cache
def get_planned_engagements_repository() -> PlannedEngagementsRepository:
    return PlannedEngagementsRepository()


@lru_cache
def get_activity_rewards_repository() -> ActivityRewardsRepository:
    return ActivityRewardsRepository()


@lru_cache
def get_creative_boost_repository() -> CreativeBoostRepository:
    return CreativeBoostRepository()


@lru_cache
def get_upsell_commissions_repository() -> UpsellCommissionsRepository:
    return UpsellCommissionsRepository()


def get_funnel_service() -> FunnelService:
    return FunnelService(repository=get_leads_repository())


def get_capacity_service() -> CapacityService:
    return CapacityService(
        crm_repository=get_crm_repository(),
        planned_repository=get_planned_engagements_repository(),
    )


def get_revenue_service() -> RevenueService:
    return RevenueService(repository=get_crm_repository())


def get_earnings_service() -> EarningsService:
    return EarningsService(
        crm_repository=get_crm_repository(),
        rewards_repository=get_activity_rewards_repository(),
        creative_boost_repository=get_creative_boost_repository(),
        commissions_repository=get_upsell_commissions_repository(),
    )
