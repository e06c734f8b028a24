"""
API usage statistics endpoint.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db
from catalog.models.schemas.usage import UsageStatsResponse
from catalog.services.usage_tracker import usage_tracker

router = APIRouter(tags=["Usage"])


@router.get("/usage-stats", response_model=UsageStatsResponse)
async def get_usage_stats(
    timeframe: str = Query("day", description="day, week or month"),
    db: AsyncSession = Depends(get_db),
):
    """Request counts, quota and errors over the timeframe, bucketed by hour."""
    return await usage_tracker.get_usage_stats(db, timeframe)
