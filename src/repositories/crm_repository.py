from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from src.analytics.capacity import classify_service
from src.core.supabase import SupabaseClient
from src.models.crm import (
    AssignmentRecord,
    ClientRecord,
    ColleagueRecord,
    EngagementRecord,
)
from src.repositories.rows import map_rows, validate_rows


class CrmRepository:
    def __init__(
        self,
        service_keywords: Optional[Mapping[str, Sequence[str]]] = None,
        client: Optional[SupabaseClient] = None,
    ) -> None:
        self.client = client or SupabaseClient()
        self.service_keywords = service_keywords or {}

    def list_clients(self) -> List[ClientRecord]:
        rows = self.client.select_all(
            table="clients",
            select="id,name,brand_name,status,start_date,end_date",
            order="created_at.asc",
        )
        return validate_rows(ClientRecord, rows, "clients")

    def list_engagements(self) -> List[EngagementRecord]:
        rows = self.client.select_all(
            table="engagements",
            select="id,client_id,name,type,status,start_date,end_date,monthly_fee",
            order="created_at.asc",
        )
        return validate_rows(EngagementRecord, rows, "engagements")

    def list_assignments(self) -> List[AssignmentRecord]:
        rows = self.client.select_all(
            table="engagement_assignments",
            select=(
                "id,engagement_id,colleague_id,engagement_service_id,role_on_engagement,"
                "cost_model,hourly_cost,monthly_cost,percentage_of_revenue,start_date,end_date,"
                "engagement_services(name,service_id)"
            ),
            order="created_at.asc",
        )
        return validate_rows(AssignmentRecord, map_rows(rows, self._tag_slot_type), "engagement_assignments")

    def list_colleagues(self, status: Optional[str] = None) -> List[ColleagueRecord]:
        filters = [("status", f"eq.{status}")] if status else None
        rows = self.client.select_all(
            table="colleagues",
            select="id,full_name,position,status,capacity_slots",
            filters=filters,
            order="full_name.asc",
        )
        return validate_rows(ColleagueRecord, rows, "colleagues")

    def get_colleague(self, colleague_id: str) -> Optional[ColleagueRecord]:
        rows = self.client.select(
            table="colleagues",
            select="id,full_name,position,status,capacity_slots",
            filters=[("id", f"eq.{colleague_id}")],
            limit=1,
        )
        records = validate_rows(ColleagueRecord, rows, "colleagues")
        return records[0] if records else None

    def _tag_slot_type(self, row: Dict[str, Any]) -> Dict[str, Any]:
        service = row.pop("engagement_services", None)
        if isinstance(service, dict) and self.service_keywords:
            row["slot_type"] = classify_service(
                service.get("name"), service.get("service_id"), self.service_keywords
            )
        return row
