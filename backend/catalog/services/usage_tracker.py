"""
API usage tracking service.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from sqlalchemy import select, func, case, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import utc_now
from catalog.core.exceptions import ValidationError
from catalog.core.logging import get_logger
from catalog.core.sql import truncate_timestamp, coerce_bucket
from catalog.models.database.api_usage import ApiUsageRecord

logger = get_logger(__name__)

TIMEFRAME_WINDOWS = {
    "day": timedelta(hours=24),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


def is_successful_status(status_code: int) -> bool:
    return 200 <= status_code < 300


class UsageTracker:
    """Records API calls and aggregates them into usage statistics."""

    async def record(
        self,
        db: AsyncSession,
        endpoint: str,
        status_code: int,
        method: Optional[str] = None,
        error_type: Optional[str] = None,
        quota_used: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ApiUsageRecord:
        """Append one usage record."""
        record = ApiUsageRecord(
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            error_type=error_type,
            quota_used=quota_used,
            usage_metadata=metadata,
            is_successful=is_successful_status(status_code),
        )
        db.add(record)
        await db.commit()
        return record

    async def get_usage_stats(
        self,
        db: AsyncSession,
        timeframe: str = "day",
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Summarise API usage over a trailing window.

        Args:
            db: Database session
            timeframe: "day" (24h), "week" (7d) or "month" (30d)
            now: End of the window, defaults to the current time

        Returns:
            Dictionary with a summary and per-hour request counts, oldest hour first
        """
        window = TIMEFRAME_WINDOWS.get(timeframe)
        if window is None:
            raise ValidationError(
                f"Invalid timeframe '{timeframe}'. Expected one of: {', '.join(TIMEFRAME_WINDOWS)}"
            )

        since = (now or utc_now()) - window
        in_window = ApiUsageRecord.timestamp >= since
        successful = func.sum(case((ApiUsageRecord.is_successful.is_(True), 1), else_=0))

        summary_result = await db.execute(
            select(
                func.count(ApiUsageRecord.id),
                func.coalesce(successful, 0),
                func.coalesce(func.sum(ApiUsageRecord.quota_used), 0),
                func.count(distinct(ApiUsageRecord.error_type)),
            ).where(in_window)
        )
        total, succeeded, quota, unique_errors = summary_result.one()

        hour = truncate_timestamp(db, ApiUsageRecord.timestamp, "hour")
        hourly_result = await db.execute(
            select(
                hour.label("hour"),
                func.count(ApiUsageRecord.id).label("requests"),
                func.coalesce(successful, 0).label("successful"),
            )
            .where(in_window)
            .group_by(hour)
            .order_by(hour)
        )

        hourly_usage = [
            {
                "hour": coerce_bucket(row.hour),
                "requests": int(row.requests),
                "successful": int(row.successful),
            }
            for row in hourly_result
        ]

        return {
            "summary": {
                "total_requests": int(total or 0),
                "successful_requests": int(succeeded or 0),
                "total_quota_used": int(quota or 0),
                "unique_errors": int(unique_errors or 0),
            },
            "hourly_usage": hourly_usage,
        }


usage_tracker = UsageTracker()
