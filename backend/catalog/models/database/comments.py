"""
Comment, reaction and badge database models.
"""
import enum

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text,
    CheckConstraint, UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.sql import func
from catalog.core.database import Base, utc_now


class ReactionType(str, enum.Enum):
    """Reaction kinds a reader can leave on a comment."""
    LIKE = "like"
    HELPFUL = "helpful"
    INSIGHTFUL = "insightful"


class BadgeType(str, enum.Enum):
    """Badges awarded to comments."""
    QUALITY = "quality"
    TRENDING = "trending"
    INFLUENTIAL = "influential"


class Comment(Base):
    """Comment on a data product, with denormalised reaction counters."""

    __tablename__ = "comments"
    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_comments_like_count_non_negative"),
        CheckConstraint("helpful_count >= 0", name="ck_comments_helpful_count_non_negative"),
        CheckConstraint("insightful_count >= 0", name="ck_comments_insightful_count_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    data_product_id = Column(Integer, ForeignKey("data_products.id", ondelete="CASCADE"), nullable=False, index=True)
    author_name = Column(String(255), nullable=False, index=True)
    content = Column(Text, nullable=False)

    like_count = Column(Integer, nullable=False, default=0, server_default="0")
    helpful_count = Column(Integer, nullable=False, default=0, server_default="0")
    insightful_count = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)

    def reaction_counts(self) -> dict:
        return {
            ReactionType.LIKE.value: self.like_count or 0,
            ReactionType.HELPFUL.value: self.helpful_count or 0,
            ReactionType.INSIGHTFUL.value: self.insightful_count or 0,
        }


# Counter column on Comment for each reaction type
REACTION_COUNTER_COLUMNS = {
    ReactionType.LIKE: "like_count",
    ReactionType.HELPFUL: "helpful_count",
    ReactionType.INSIGHTFUL: "insightful_count",
}


class CommentReaction(Base):
    """One user's reaction of one type to one comment."""

    __tablename__ = "comment_reactions"
    __table_args__ = (
        UniqueConstraint("comment_id", "type", "user_identifier", name="uq_comment_reactions_comment_type_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    comment_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        SQLEnum(ReactionType, name="reactiontype", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    user_identifier = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())


class CommentBadge(Base):
    """Badge awarded to a comment."""

    __tablename__ = "comment_badges"

    id = Column(Integer, primary_key=True, index=True)
    comment_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        SQLEnum(BadgeType, name="badgetype", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
