from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.analytics.funnel import NEW_LEAD, SIDE_STAGES, WON
from src.core.supabase import SupabaseClient
from src.models.leads import NewLeadEntryRecord, StageTransitionRecord
from src.repositories.rows import map_rows, validate_rows


class LeadsRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    def list_intake(self) -> List[NewLeadEntryRecord]:
        rows = self.client.select_all(
            table="leads",
            select="id,created_at,source,stage,estimated_price,converted_to_client_id",
            order="created_at.asc",
        )
        return validate_rows(NewLeadEntryRecord, map_rows(rows, self._to_intake_row), "leads")

    def list_transitions(self) -> List[StageTransitionRecord]:
        rows = self.client.select_all(
            table="lead_stage_transitions",
            select="id,lead_id,from_stage,to_stage,transition_value,confirmed_at,confirmed_by",
            order="confirmed_at.asc",
        )
        return validate_rows(StageTransitionRecord, rows, "lead_stage_transitions")

    def create_transition(self, payload: Dict[str, Any]) -> StageTransitionRecord:
        rows = self.client.insert(table="lead_stage_transitions", payload=payload)
        return StageTransitionRecord.model_validate(rows[0])

    @staticmethod
    def _to_intake_row(row: Dict[str, Any]) -> Dict[str, Any]:
        stage = row.get("stage")
        is_won = stage == WON or bool(row.get("converted_to_client_id"))
        return {
            "lead_id": row.get("id"),
            "entered_at": row.get("created_at"),
            "source": row.get("source"),
            # Qualified means the lead made it past intake into the main chain.
            "is_qualified": is_won or (stage is not None and stage != NEW_LEAD and stage not in SIDE_STAGES),
            "is_won": is_won,
            "value": row.get("estimated_price"),
        }
