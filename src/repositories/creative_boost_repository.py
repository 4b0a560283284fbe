from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.core.supabase import SupabaseClient
from src.models.crm import CreativeOutputRecord
from src.repositories.rows import map_rows, validate_rows


class CreativeBoostRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    def list_outputs(self, colleague_id: Optional[str] = None) -> List[CreativeOutputRecord]:
        filters = [("colleague_id", f"eq.{colleague_id}")] if colleague_id else None
        rows = self.client.select_all(
            table="creative_boost_outputs",
            select=(
                "id,colleague_id,client_id,output_type_id,year,month,normal_count,express_count,"
                "reward_per_credit,output_types(base_credits)"
            ),
            filters=filters,
            order="year.desc,month.desc",
        )
        return validate_rows(CreativeOutputRecord, map_rows(rows, self._flatten), "creative_boost_outputs")

    @staticmethod
    def _flatten(row: Dict[str, Any]) -> Dict[str, Any]:
        output_type = row.pop("output_types", None)
        if isinstance(output_type, dict):
            row["base_credits"] = output_type.get("base_credits")
        return row
