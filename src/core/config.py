from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CAPACITY_SLOTS: Dict[str, int] = {"meta": 3, "google": 2, "graphics": 2}

# Checked in order; the first channel with a matching keyword wins.
DEFAULT_POSITION_KEYWORDS: Dict[str, List[str]] = {
    "meta": ["meta", "facebook", "socials"],
    "google": ["ppc", "google", "performance"],
    "graphics": ["grafi", "design", "creative"],
}

DEFAULT_SERVICE_KEYWORDS: Dict[str, List[str]] = {
    "meta": ["meta", "facebook", "instagram", "socials"],
    "google": ["google", "ppc", "search", "s-klik", "sklik"],
    "graphics": ["grafi", "design", "creative", "boost", "graphics"],
}


class Settings(BaseSettings):
    # Ignore unrelated env keys so local/dev .env can include optional integrations.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "AgencyOps Analytics Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:5173,http://127.0.0.1:5173"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")
    max_query_rows: int = Field(default=5000, alias="MAX_QUERY_ROWS")

    funnel_trend_months: int = Field(default=12, alias="FUNNEL_TREND_MONTHS")

    capacity_default_slots: Dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_CAPACITY_SLOTS), alias="CAPACITY_DEFAULT_SLOTS"
    )
    capacity_fallback_slot: str = Field(default="meta", alias="CAPACITY_FALLBACK_SLOT")
    capacity_position_keywords: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_POSITION_KEYWORDS.items()},
        alias="CAPACITY_POSITION_KEYWORDS",
    )
    capacity_service_keywords: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_SERVICE_KEYWORDS.items()},
        alias="CAPACITY_SERVICE_KEYWORDS",
    )

    margin_alert_threshold: float = Field(default=30.0, alias="MARGIN_ALERT_THRESHOLD")
    ending_contract_window_days: int = Field(default=60, alias="ENDING_CONTRACT_WINDOW_DAYS")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
