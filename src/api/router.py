from __future__ import annotations

from fastapi import APIRouter

from src.api.capacity import router as capacity_router
from src.api.funnel import router as funnel_router
from src.api.health import router as health_router
from src.api.periods import router as periods_router
from src.api.planned_engagements import router as planned_engagements_router
from src.api.revenue import router as revenue_router
from src.api.team_earnings import router as team_earnings_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(periods_router)
api_router.include_router(funnel_router)
api_router.include_router(capacity_router)
api_router.include_router(planned_engagements_router)
api_router.include_router(revenue_router)
api_router.include_router(team_earnings_router)
