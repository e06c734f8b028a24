"""
Comment and reaction API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db, utc_now
from catalog.middleware.auth import CurrentUser
from catalog.models.schemas.comments import (
    CommentCreate,
    CommentResponse,
    CommentCreatedResponse,
    ReactionRequest,
    ReactionResponse,
)
from catalog.services.comments import comment_service
from catalog.services.reactions import reaction_service

router = APIRouter(tags=["Comments"])


@router.get("/data-products/{product_id}/comments", response_model=List[CommentResponse])
async def list_comments(product_id: int, db: AsyncSession = Depends(get_db)):
    """Comments on a data product, newest first."""
    comments = await comment_service.list_comments(db, product_id)
    return [CommentResponse.from_orm(comment, badges) for comment, badges in comments]


@router.post(
    "/data-products/{product_id}/comments",
    response_model=CommentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    product_id: int,
    request: CommentCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    comment, total = await comment_service.create_comment(
        db, product_id, author_name=current_user.username, content=request.content
    )
    return CommentCreatedResponse(
        comment=CommentResponse.from_orm(comment),
        metrics={"total_comments": total, "timestamp": utc_now()},
    )


@router.post("/comments/{comment_id}/reactions", response_model=ReactionResponse)
async def add_reaction(
    comment_id: int,
    request: ReactionRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """
    React to a comment.

    Each user may leave each reaction type once per comment; a repeat returns 409.
    """
    counts = await reaction_service.add_reaction(db, comment_id, request.type, current_user.username)
    return ReactionResponse(reactions=counts)
