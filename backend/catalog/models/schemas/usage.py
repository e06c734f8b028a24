"""
API usage statistics schemas.
"""
from typing import List
from datetime import datetime
from catalog.models.schemas.base import CamelModel


class UsageSummary(CamelModel):
    total_requests: int = 0
    successful_requests: int = 0
    total_quota_used: int = 0
    unique_errors: int = 0


class HourlyUsage(CamelModel):
    hour: datetime
    requests: int
    successful: int


class UsageStatsResponse(CamelModel):
    """Usage summary over a timeframe, bucketed by hour."""
    summary: UsageSummary
    hourly_usage: List[HourlyUsage]
