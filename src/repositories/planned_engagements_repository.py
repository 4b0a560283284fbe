from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from src.core.supabase import SupabaseClient
from src.models.crm import PlannedEngagementRecord
from src.repositories.rows import validate_rows


class PlannedEngagementsRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    def list_planned(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[PlannedEngagementRecord]:
        filters = []
        if start_date:
            filters.append(("start_date", f"gte.{start_date.isoformat()}"))
        if end_date:
            filters.append(("start_date", f"lte.{end_date.isoformat()}"))
        rows = self.client.select_all(
            table="planned_engagements",
            select="*",
            filters=filters or None,
            order="start_date.asc",
        )
        return validate_rows(PlannedEngagementRecord, rows, "planned_engagements")

    def create_planned(self, payload: Dict[str, Any]) -> PlannedEngagementRecord:
        rows = self.client.insert(table="planned_engagements", payload=payload)
        return PlannedEngagementRecord.model_validate(rows[0])

    def delete_planned(self, planned_id: str) -> bool:
        rows = self.client.delete(table="planned_engagements", filters=[("id", f"eq.{planned_id}")])
        return bool(rows)
