"""
Comment reaction service.
"""
from typing import Dict, Union

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import NotFoundError, ValidationError, DuplicateReactionError
from catalog.core.logging import get_logger
from catalog.core.metrics import comment_reactions_total
from catalog.core.sql import insert_or_ignore
from catalog.models.database.comments import Comment, CommentReaction, ReactionType, REACTION_COUNTER_COLUMNS

logger = get_logger(__name__)


def parse_reaction_type(value: Union[str, ReactionType]) -> ReactionType:
    try:
        return ReactionType(value)
    except ValueError:
        allowed = ", ".join(reaction.value for reaction in ReactionType)
        raise ValidationError(f"Invalid reaction type '{value}'. Expected one of: {allowed}")


class ReactionService:
    """Records at most one reaction of each type per user and comment."""

    async def add_reaction(
        self,
        db: AsyncSession,
        comment_id: int,
        reaction_type: Union[str, ReactionType],
        user_identifier: str,
    ) -> Dict[str, int]:
        """
        Record a reaction and bump the comment's counter.

        The reaction row is inserted with ON CONFLICT DO NOTHING against the
        (comment, type, user) unique constraint; the counter is incremented
        in SQL only when the insert produced a row.

        Returns:
            Updated counters: {"like", "helpful", "insightful"}

        Raises:
            ValidationError: unknown reaction type or empty user
            NotFoundError: unknown comment
            DuplicateReactionError: the user already left this reaction type
        """
        reaction = parse_reaction_type(reaction_type)
        if not user_identifier:
            raise ValidationError("A user identifier is required to react")

        if await db.get(Comment, comment_id) is None:
            raise NotFoundError(f"Comment {comment_id} not found")

        reaction_id = await insert_or_ignore(
            db,
            CommentReaction,
            {"comment_id": comment_id, "type": reaction, "user_identifier": user_identifier},
        )
        if reaction_id is None:
            await db.rollback()
            comment_reactions_total.labels(reaction_type=reaction.value, outcome="duplicate").inc()
            raise DuplicateReactionError(
                f"You have already reacted with '{reaction.value}' to comment {comment_id}"
            )

        counter = getattr(Comment, REACTION_COUNTER_COLUMNS[reaction])
        result = await db.execute(
            update(Comment)
            .where(Comment.id == comment_id)
            .values({counter: counter + 1})
            .returning(Comment.like_count, Comment.helpful_count, Comment.insightful_count)
        )
        like, helpful, insightful = result.one()
        await db.commit()

        comment_reactions_total.labels(reaction_type=reaction.value, outcome="recorded").inc()
        logger.info(
            f"Recorded {reaction.value} reaction on comment {comment_id}",
            extra={"comment_id": comment_id, "reaction_type": reaction.value},
        )
        return {
            ReactionType.LIKE.value: like,
            ReactionType.HELPFUL.value: helpful,
            ReactionType.INSIGHTFUL.value: insightful,
        }


reaction_service = ReactionService()
