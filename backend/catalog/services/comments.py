"""
Comment service.
"""
from typing import Dict, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import ValidationError
from catalog.core.logging import get_logger
from catalog.models.database.comments import Comment, CommentBadge
from catalog.services.data_products import get_product_or_404

logger = get_logger(__name__)


class CommentService:
    """Lists and posts comments on data products."""

    async def list_comments(
        self,
        db: AsyncSession,
        product_id: int,
    ) -> List[Tuple[Comment, List[CommentBadge]]]:
        """Comments on a product, newest first, each with its badges."""
        await get_product_or_404(db, product_id)

        result = await db.execute(
            select(Comment)
            .where(Comment.data_product_id == product_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        comments = list(result.scalars().all())
        if not comments:
            return []

        badges_result = await db.execute(
            select(CommentBadge)
            .where(CommentBadge.comment_id.in_([comment.id for comment in comments]))
            .order_by(CommentBadge.created_at, CommentBadge.id)
        )
        badges: Dict[int, List[CommentBadge]] = {}
        for badge in badges_result.scalars().all():
            badges.setdefault(badge.comment_id, []).append(badge)

        return [(comment, badges.get(comment.id, [])) for comment in comments]

    async def create_comment(
        self,
        db: AsyncSession,
        product_id: int,
        author_name: str,
        content: str,
    ) -> Tuple[Comment, int]:
        """
        Post a comment.

        Returns:
            The new comment and the number of comments on the product
        """
        if not content or not content.strip():
            raise ValidationError("Comment content is required")
        await get_product_or_404(db, product_id)

        comment = Comment(data_product_id=product_id, author_name=author_name, content=content.strip())
        db.add(comment)
        await db.commit()
        await db.refresh(comment)

        total = await db.execute(select(func.count(Comment.id)).where(Comment.data_product_id == product_id))
        logger.info(
            f"Comment {comment.id} posted on product {product_id}",
            extra={"comment_id": comment.id, "data_product_id": product_id},
        )
        return comment, int(total.scalar_one())


comment_service = CommentService()
