"""
Stewardship schemas.
"""
from typing import List
from datetime import datetime
from catalog.models.schemas.base import CamelModel


class StewardshipBadge(CamelModel):
    type: str
    name: str
    description: str
    earned_at: datetime


class StewardshipActivity(CamelModel):
    type: str
    description: str
    timestamp: datetime
    impact: int


class QualityTrendPoint(CamelModel):
    date: str
    score: float


class StewardshipMetricsResponse(CamelModel):
    """Reputation summary for the current user."""
    total_comments: int
    helpful_comments: int
    quality_improvements: int
    data_products_managed: int
    reputation_score: int
    level: int
    badges: List[StewardshipBadge]
    recent_activities: List[StewardshipActivity]
    quality_trend: List[QualityTrendPoint]
