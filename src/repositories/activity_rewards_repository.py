from __future__ import annotations

from typing import List, Optional

from src.core.supabase import SupabaseClient
from src.models.crm import ActivityRewardRecord
from src.repositories.rows import validate_rows


class ActivityRewardsRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    def list_rewards(self, colleague_id: Optional[str] = None) -> List[ActivityRewardRecord]:
        filters = [("colleague_id", f"eq.{colleague_id}")] if colleague_id else None
        rows = self.client.select_all(
            table="activity_rewards",
            select="id,colleague_id,description,billing_type,amount,activity_date",
            filters=filters,
            order="activity_date.desc",
        )
        return validate_rows(ActivityRewardRecord, rows, "activity_rewards")
