from __future__ import annotations

import os
from datetime import date
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from src.api.dependencies import (  # noqa: E402
    get_capacity_service,
    get_earnings_service,
    get_funnel_service,
    get_revenue_service,
)
from src.main import create_app  # noqa: E402
from src.models.crm import (  # noqa: E402
    ActivityRewardRecord,
    AssignmentRecord,
    ClientRecord,
    ColleagueRecord,
    CreativeOutputRecord,
    EngagementRecord,
    PlannedEngagementRecord,
    UpsellCommissionRecord,
)
from src.models.leads import NewLeadEntryRecord, StageTransitionRecord  # noqa: E402
from src.services.capacity_service import CapacityService  # noqa: E402
from src.services.earnings_service import EarningsService  # noqa: E402
from src.services.funnel_service import FunnelService  # noqa: E402
from src.services.revenue_service import RevenueService  # noqa: E402


class StubCrmRepository:
    def __init__(self) -> None:
        self.clients = [
            ClientRecord(id="client-1", name="Acme", brand_name="Acme Brand", status="active", start_date="2024-01-01"),
            ClientRecord(id="client-2", name="Beta", status="inactive", start_date="2024-06-01", end_date="2024-12-31"),
        ]
        self.engagements = [
            EngagementRecord(
                id="eng-1",
                client_id="client-1",
                name="Acme Meta",
                status="active",
                start_date="2024-01-01",
                monthly_fee=1000,
            ),
            EngagementRecord(
                id="eng-2",
                client_id="client-2",
                name="Beta Google",
                status="completed",
                start_date="2024-06-01",
                end_date="2024-12-31",
                monthly_fee=500,
            ),
        ]
        self.assignments = [
            AssignmentRecord(
                id="assign-1",
                engagement_id="eng-1",
                colleague_id="colleague-1",
                cost_model="fixed_monthly",
                monthly_cost=300,
                start_date="2024-01-01",
            ),
            AssignmentRecord(
                id="assign-2",
                engagement_id="eng-2",
                colleague_id="colleague-2",
                cost_model="percentage",
                percentage_of_revenue=20,
                start_date="2024-06-01",
                end_date="2024-12-31",
            ),
        ]
        self.colleagues = [
            ColleagueRecord(
                id="colleague-1",
                full_name="Jana Novak",
                position="Meta specialist",
                status="active",
                capacity_slots={"meta": 3, "google": 2, "graphics": 2},
            ),
            ColleagueRecord(id="colleague-2", full_name="Petr Svoboda", position="PPC", status="active"),
        ]

    def list_clients(self) -> List[ClientRecord]:
        return self.clients

    def list_engagements(self) -> List[EngagementRecord]:
        return self.engagements

    def list_assignments(self) -> List[AssignmentRecord]:
        return self.assignments

    def list_colleagues(self, status: Optional[str] = None) -> List[ColleagueRecord]:
        _ = status
        return self.colleagues

    def get_colleague(self, colleague_id: str) -> Optional[ColleagueRecord]:
        return next((colleague for colleague in self.colleagues if colleague.id == colleague_id), None)


class StubLeadsRepository:
    def __init__(self) -> None:
        self.created_payload: Optional[Dict[str, Any]] = None
        self.intake = [
            NewLeadEntryRecord(lead_id="lead-1", entered_at="2025-03-02", source="web"),
            NewLeadEntryRecord(lead_id="lead-2", entered_at="2025-03-10", source="web", is_qualified=True),
            NewLeadEntryRecord(lead_id="lead-3", entered_at="2025-03-21", source="referral", value=1200),
            NewLeadEntryRecord(lead_id="lead-4", entered_at="2025-02-14", source="web"),
        ]
        self.transitions = [
            StageTransitionRecord(lead_id="lead-1", from_stage="new_lead", to_stage="meeting_done", confirmed_at="2025-03-05"),
            StageTransitionRecord(lead_id="lead-2", from_stage="new_lead", to_stage="meeting_done", confirmed_at="2025-03-12"),
            StageTransitionRecord(
                lead_id="lead-1", from_stage="meeting_done", to_stage="waiting_access", confirmed_at="2025-03-15"
            ),
        ]

    def list_intake(self) -> List[NewLeadEntryRecord]:
        return self.intake

    def list_transitions(self) -> List[StageTransitionRecord]:
        return self.transitions

    def create_transition(self, payload: Dict[str, Any]) -> StageTransitionRecord:
        self.created_payload = payload
        return StageTransitionRecord(id="transition-1", **payload)


class StubPlannedEngagementsRepository:
    def __init__(self) -> None:
        self.created_payload: Optional[Dict[str, Any]] = None
        self.planned = [
            PlannedEngagementRecord(
                id="planned-1",
                name="Gamma launch",
                client_name="Gamma",
                monthly_fee=800,
                start_date="2025-03-10",
                assigned_colleague_ids=["colleague-1"],
            )
        ]

    def list_planned(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[PlannedEngagementRecord]:
        return [
            record
            for record in self.planned
            if (start_date is None or (record.start_date and record.start_date >= start_date))
            and (end_date is None or (record.start_date and record.start_date <= end_date))
        ]

    def create_planned(self, payload: Dict[str, Any]) -> PlannedEngagementRecord:
        self.created_payload = payload
        return PlannedEngagementRecord(id="planned-2", created_at="2025-03-01T08:00:00Z", **payload)

    def delete_planned(self, planned_id: str) -> bool:
        return any(record.id == planned_id for record in self.planned)


class StubActivityRewardsRepository:
    def __init__(self) -> None:
        self.rewards = [
            ActivityRewardRecord(
                id="reward-1", colleague_id="colleague-1", description="Audit", amount=150, activity_date="2025-03-05"
            ),
            ActivityRewardRecord(
                id="reward-2", colleague_id="colleague-1", description="Workshop", amount=90, activity_date="2025-04-02"
            ),
        ]

    def list_rewards(self, colleague_id: Optional[str] = None) -> List[ActivityRewardRecord]:
        return [reward for reward in self.rewards if colleague_id is None or reward.colleague_id == colleague_id]


class StubCreativeBoostRepository:
    def __init__(self) -> None:
        self.outputs: List[CreativeOutputRecord] = []

    def list_outputs(self, colleague_id: Optional[str] = None) -> List[CreativeOutputRecord]:
        return [output for output in self.outputs if colleague_id is None or output.colleague_id == colleague_id]


class StubUpsellCommissionsRepository:
    def __init__(self) -> None:
        self.commissions: List[UpsellCommissionRecord] = []

    def list_approved(self, colleague_id: Optional[str] = None) -> List[UpsellCommissionRecord]:
        return [
            commission
            for commission in self.commissions
            if colleague_id is None or commission.colleague_id == colleague_id
        ]


@pytest.fixture()
def crm_repository() -> StubCrmRepository:
    return StubCrmRepository()


@pytest.fixture()
def leads_repository() -> StubLeadsRepository:
    return StubLeadsRepository()


@pytest.fixture()
def planned_repository() -> StubPlannedEngagementsRepository:
    return StubPlannedEngagementsRepository()


@pytest.fixture()
def rewards_repository() -> StubActivityRewardsRepository:
    return StubActivityRewardsRepository()


@pytest.fixture()
def creative_boost_repository() -> StubCreativeBoostRepository:
    return StubCreativeBoostRepository()


@pytest.fixture()
def commissions_repository() -> StubUpsellCommissionsRepository:
    return StubUpsellCommissionsRepository()


@pytest.fixture()
def client(
    crm_repository: StubCrmRepository,
    leads_repository: StubLeadsRepository,
    planned_repository: StubPlannedEngagementsRepository,
    rewards_repository: StubActivityRewardsRepository,
    creative_boost_repository: StubCreativeBoostRepository,
    commissions_repository: StubUpsellCommissionsRepository,
) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_funnel_service] = lambda: FunnelService(repository=leads_repository)
    app.dependency_overrides[get_capacity_service] = lambda: CapacityService(
        crm_repository=crm_repository, planned_repository=planned_repository
    )
    app.dependency_overrides[get_revenue_service] = lambda: RevenueService(repository=crm_repository)
    app.dependency_overrides[get_earnings_service] = lambda: EarningsService(
        crm_repository=crm_repository,
        rewards_repository=rewards_repository,
        creative_boost_repository=creative_boost_repository,
        commissions_repository=commissions_repository,
    )
    return TestClient(app)
