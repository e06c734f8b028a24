"""
Comment and reaction schemas.
"""
from typing import List
from datetime import datetime
from pydantic import ConfigDict, Field
from catalog.models.schemas.base import CamelModel


class CommentCreate(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=10000)


class ReactionCounts(CamelModel):
    like: int = 0
    helpful: int = 0
    insightful: int = 0


class CommentBadgeResponse(CamelModel):
    type: str
    created_at: datetime


class CommentResponse(CamelModel):
    """Comment with its reaction counters and badges."""
    id: int
    data_product_id: int
    author_name: str
    content: str
    reactions: ReactionCounts
    badges: List[CommentBadgeResponse] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_orm(cls, comment, badges=None):
        """Create from ORM model."""
        return cls(
            id=comment.id,
            data_product_id=comment.data_product_id,
            author_name=comment.author_name,
            content=comment.content,
            reactions=comment.reaction_counts(),
            badges=[
                CommentBadgeResponse(type=badge.type.value, created_at=badge.created_at)
                for badge in (badges or [])
            ],
            created_at=comment.created_at,
        )


class CommentMetrics(CamelModel):
    total_comments: int
    timestamp: datetime


class CommentCreatedResponse(CamelModel):
    comment: CommentResponse
    metrics: CommentMetrics


class ReactionRequest(CamelModel):
    """Reaction kind: like, helpful or insightful. The reacting user comes from the bearer token."""
    type: str


class ReactionResponse(CamelModel):
    reactions: ReactionCounts
