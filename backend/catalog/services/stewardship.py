"""
Stewardship reputation service.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List

from sqlalchemy import select, func, case, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import utc_now
from catalog.core.logging import get_logger
from catalog.core.sql import truncate_timestamp, coerce_bucket, as_utc
from catalog.models.database.comments import Comment, CommentBadge, CommentReaction, ReactionType
from catalog.models.database.data_products import DataProduct
from catalog.models.database.quality_metrics import QualityMetric

logger = get_logger(__name__)

HELPFUL_COMMENT_POINTS = 10
BADGE_POINTS = 20
QUALITY_IMPROVEMENT_POINTS = 15
MANAGED_PRODUCT_POINTS = 25

RECENT_ACTIVITY_LIMIT = 5
COMMENT_ACTIVITY_IMPACT = 10
ACTIVITY_EXCERPT_LENGTH = 50
QUALITY_TREND_DAYS = 30

BADGE_DESCRIPTIONS = {
    "quality": "Consistently provided high-quality metadata improvements",
    "trending": "Created highly engaging discussions about data products",
    "influential": "Significantly impacted data product quality through feedback",
}


def reputation_score(
    helpful_comments: int,
    badges: int,
    quality_improvements: int,
    data_products_managed: int,
) -> int:
    return (
        helpful_comments * HELPFUL_COMMENT_POINTS
        + badges * BADGE_POINTS
        + quality_improvements * QUALITY_IMPROVEMENT_POINTS
        + data_products_managed * MANAGED_PRODUCT_POINTS
    )


def calculate_level(score: int) -> int:
    """Level 1 starts at 0 points, with a new level every 100 points."""
    return score // 100 + 1


def badge_description(badge_type: str) -> str:
    return BADGE_DESCRIPTIONS.get(badge_type, "Achievement unlocked!")


def describe_comment(content: str) -> str:
    excerpt = content[:ACTIVITY_EXCERPT_LENGTH]
    if len(content) > ACTIVITY_EXCERPT_LENGTH:
        excerpt += "..."
    return f'Added a comment: "{excerpt}"'


class StewardshipService:
    """Derives a user's stewardship reputation from their comments, badges and products."""

    async def count_comments(self, db: AsyncSession, username: str):
        """Total comments and comments with at least one helpful reaction."""
        has_helpful = (
            select(CommentReaction.id)
            .where(
                CommentReaction.comment_id == Comment.id,
                CommentReaction.type == ReactionType.HELPFUL,
            )
            .exists()
        )
        result = await db.execute(
            select(
                func.count(Comment.id),
                func.coalesce(func.sum(case((has_helpful, 1), else_=0)), 0),
            ).where(Comment.author_name == username)
        )
        total, helpful = result.one()
        return int(total or 0), int(helpful or 0)

    async def get_badges(self, db: AsyncSession, username: str) -> List[Dict[str, Any]]:
        result = await db.execute(
            select(CommentBadge.type, CommentBadge.created_at)
            .join(Comment, Comment.id == CommentBadge.comment_id)
            .where(Comment.author_name == username)
            .order_by(CommentBadge.created_at.desc(), CommentBadge.id.desc())
        )
        return [
            {
                "type": badge_type.value,
                "name": f"{badge_type.value.capitalize()} Badge",
                "description": badge_description(badge_type.value),
                "earned_at": as_utc(created_at),
            }
            for badge_type, created_at in result.all()
        ]

    async def count_managed_products(self, db: AsyncSession, username: str) -> int:
        result = await db.execute(select(func.count(DataProduct.id)).where(DataProduct.owner == username))
        return int(result.scalar_one())

    async def count_quality_improvements(self, db: AsyncSession) -> int:
        """
        Distinct products with an observation above the preceding one for the same metric.

        Catalog-wide: observations are not attributed to users.
        """
        previous_value = func.lag(QualityMetric.value).over(
            partition_by=(QualityMetric.data_product_id, QualityMetric.metric_definition_id),
            order_by=(QualityMetric.timestamp, QualityMetric.id),
        )
        sequenced = select(
            QualityMetric.data_product_id.label("data_product_id"),
            QualityMetric.value.label("value"),
            previous_value.label("previous_value"),
        ).subquery()

        result = await db.execute(
            select(func.count(distinct(sequenced.c.data_product_id))).where(
                sequenced.c.value > sequenced.c.previous_value
            )
        )
        return int(result.scalar_one())

    async def get_recent_activities(self, db: AsyncSession, username: str) -> List[Dict[str, Any]]:
        result = await db.execute(
            select(Comment.content, Comment.created_at)
            .where(Comment.author_name == username)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        return [
            {
                "type": "comment",
                "description": describe_comment(content),
                "timestamp": as_utc(created_at),
                "impact": COMMENT_ACTIVITY_IMPACT,
            }
            for content, created_at in result.all()
        ]

    async def get_quality_trend(
        self,
        db: AsyncSession,
        days: int = QUALITY_TREND_DAYS,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Daily average of all observations over the last ``days`` days, oldest first."""
        day = truncate_timestamp(db, QualityMetric.timestamp, "day")
        result = await db.execute(
            select(day.label("day"), func.avg(QualityMetric.value).label("score"))
            .where(QualityMetric.timestamp >= (now or utc_now()) - timedelta(days=days))
            .group_by(day)
            .order_by(day)
        )
        return [
            {"date": coerce_bucket(row.day).date().isoformat(), "score": round(float(row.score), 2)}
            for row in result
        ]

    async def get_metrics(self, db: AsyncSession, username: str) -> Dict[str, Any]:
        """
        Get the stewardship summary for a user.

        Args:
            db: Database session
            username: Authenticated user's name, matched against comment authors and product owners

        Returns:
            Dictionary with counts, reputation score, level, badges, recent activities and quality trend
        """
        total_comments, helpful_comments = await self.count_comments(db, username)
        badges = await self.get_badges(db, username)
        managed = await self.count_managed_products(db, username)
        improvements = await self.count_quality_improvements(db)

        score = reputation_score(helpful_comments, len(badges), improvements, managed)

        return {
            "total_comments": total_comments,
            "helpful_comments": helpful_comments,
            "quality_improvements": improvements,
            "data_products_managed": managed,
            "reputation_score": score,
            "level": calculate_level(score),
            "badges": badges,
            "recent_activities": await self.get_recent_activities(db, username),
            "quality_trend": await self.get_quality_trend(db),
        }


stewardship_service = StewardshipService()
