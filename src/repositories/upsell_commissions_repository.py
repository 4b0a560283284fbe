from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.analytics.earnings import service_commission_date
from src.core.supabase import SupabaseClient
from src.models.crm import UpsellCommissionRecord
from src.repositories.rows import map_rows, validate_rows
from src.shared.time import coerce_date
from src.shared.values import coerce_float


APPROVED_FILTERS = [
    ("upsell_status", "eq.approved"),
    ("upsold_by_id", "not.is.null"),
    ("upsell_commission_percent", "not.is.null"),
]


class UpsellCommissionsRepository:
    """Approved upsells from extra work and from services added to running engagements."""

    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    def list_approved(self, colleague_id: Optional[str] = None) -> List[UpsellCommissionRecord]:
        filters = list(APPROVED_FILTERS)
        if colleague_id:
            filters.append(("upsold_by_id", f"eq.{colleague_id}"))
        extra_work = self.client.select_all(
            table="extra_works",
            select="id,upsold_by_id,upsell_commission_percent,amount,work_date",
            filters=filters,
            order="work_date.desc",
        )
        services = self.client.select_all(
            table="engagement_services",
            select=(
                "id,upsold_by_id,upsell_commission_percent,price,billing_type,effective_from,created_at,"
                "creative_boost_max_credits,creative_boost_price_per_credit,engagements(client_id)"
            ),
            filters=filters,
            order="created_at.desc",
        )
        rows = map_rows(extra_work, self._from_extra_work)
        rows.extend(map_rows([row for row in services if self._has_client(row)], self._from_service))
        return validate_rows(UpsellCommissionRecord, rows, "upsell_commissions")

    @staticmethod
    def _from_extra_work(row: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": row.get("id"),
            "colleague_id": row.get("upsold_by_id"),
            "item_type": "extra_work",
            "amount": row.get("amount"),
            "commission_percent": row.get("upsell_commission_percent"),
            "commission_date": row.get("work_date"),
        }

    @staticmethod
    def _has_client(row: Any) -> bool:
        if not isinstance(row, dict):
            return True
        engagement = row.get("engagements")
        return isinstance(engagement, dict) and bool(engagement.get("client_id"))

    @staticmethod
    def _from_service(row: Dict[str, Any]) -> Dict[str, Any]:
        max_credits = coerce_float(row.get("creative_boost_max_credits"))
        price_per_credit = coerce_float(row.get("creative_boost_price_per_credit"))
        if max_credits is not None and price_per_credit is not None:
            amount: Optional[float] = max_credits * price_per_credit
        else:
            amount = coerce_float(row.get("price"))
        return {
            "id": row.get("id"),
            "colleague_id": row.get("upsold_by_id"),
            "item_type": "service",
            "amount": amount,
            "commission_percent": row.get("upsell_commission_percent"),
            "commission_date": service_commission_date(
                row.get("billing_type"),
                coerce_date(row.get("effective_from")),
                coerce_date(row.get("created_at")),
            ),
        }
