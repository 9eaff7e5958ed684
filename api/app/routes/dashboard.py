"""Dashboard endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db
from app.core.redis import cache_key, get_cached, set_cached
from app.middleware.auth import CurrentUser
from app.schemas import DashboardResponse
from app.services.dashboard import get_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
settings = get_settings()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get dashboard data with caching (per caller, since project totals are owner-scoped)."""
    ck = cache_key("dashboard", user.id)
    cached = await get_cached(ck)
    if cached:
        return cached

    stats = await get_dashboard_stats(db, user.id)
    response = DashboardResponse.model_validate(stats, from_attributes=True)

    await set_cached(ck, response.model_dump(mode="json"), ttl=settings.cache_ttl_dashboard)
    return response
