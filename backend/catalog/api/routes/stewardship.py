"""
Stewardship reputation endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db
from catalog.middleware.auth import CurrentUser
from catalog.models.schemas.stewardship import StewardshipMetricsResponse
from catalog.services.stewardship import stewardship_service

router = APIRouter(prefix="/stewardship", tags=["Stewardship"])


@router.get("/metrics", response_model=StewardshipMetricsResponse)
async def get_stewardship_metrics(current_user: CurrentUser, db: AsyncSession = Depends(get_db)):
    """Reputation score, level, badges and recent activity of the current user."""
    return await stewardship_service.get_metrics(db, current_user.username)
