"""
Petstagram Backend — Comment Service
======================================

What:  Create, read, list and edit comments on a post.

Ordering:
    list_comments() sorts by created_at, then id as a tie-breaker so that
    comments written in the same instant keep a stable order. Ascending
    (oldest first, conversation order) is the default; the router passes
    the configured or requested direction.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from petstagram.exceptions import NotFoundError, StorageError, ValidationError
from petstagram.models import Comment
from petstagram.schemas.interaction import CommentResponse
from petstagram.services.post_service import require_post

logger = logging.getLogger(__name__)

COMMENT_ORDERS = {"asc": asc, "desc": desc}


class CommentService:
    """Business logic layer for comments."""

    async def create_comment(
        self,
        db: AsyncSession,
        post_id: UUID,
        author_id: str,
        text: str,
    ) -> CommentResponse:
        """
        Raises:
            NotFoundError: the post does not exist
            StorageError: insert failed
        """
        await require_post(db, post_id)
        comment = Comment(post_id=post_id, author_id=author_id, text=text)
        try:
            db.add(comment)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error commenting on post %s: %s", post_id, str(e))
            raise StorageError(
                message="Could not save the comment. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e

        logger.info("Comment %s added to post %s by %s", comment.id, post_id, author_id)
        return CommentResponse.model_validate(comment)

    async def _require_comment(self, db: AsyncSession, comment_id: UUID) -> Comment:
        try:
            comment = await db.get(Comment, comment_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching comment %s: %s", comment_id, str(e))
            raise StorageError(
                message="Could not retrieve the comment. Please try again.",
                context={"comment_id": str(comment_id), "error_type": type(e).__name__},
            ) from e
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=str(comment_id))
        return comment

    async def get_comment(self, db: AsyncSession, comment_id: UUID) -> CommentResponse:
        return CommentResponse.model_validate(await self._require_comment(db, comment_id))

    async def list_comments(
        self,
        db: AsyncSession,
        post_id: UUID,
        order: str = "asc",
    ) -> List[CommentResponse]:
        """
        Comments on a post ordered by created_at.

        Raises:
            ValidationError: order is not 'asc' or 'desc'
            NotFoundError: the post does not exist
        """
        direction = COMMENT_ORDERS.get(order)
        if direction is None:
            raise ValidationError(
                message=f"Invalid order '{order}'. Must be 'asc' or 'desc'",
                field="order",
            )
        await require_post(db, post_id)

        try:
            result = await db.execute(
                select(Comment)
                .where(Comment.post_id == post_id)
                .order_by(direction(Comment.created_at), direction(Comment.id))
            )
            comments = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing comments for %s: %s", post_id, str(e))
            raise StorageError(
                message="Could not retrieve comments. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e
        return [CommentResponse.model_validate(comment) for comment in comments]

    async def update_comment(
        self,
        db: AsyncSession,
        comment_id: UUID,
        text: str,
    ) -> CommentResponse:
        """
        Raises:
            NotFoundError: no comment with that id
            StorageError: update failed
        """
        comment = await self._require_comment(db, comment_id)
        comment.text = text
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating comment %s: %s", comment_id, str(e))
            raise StorageError(
                message="Could not update the comment. Please try again.",
                context={"comment_id": str(comment_id), "error_type": type(e).__name__},
            ) from e
        return CommentResponse.model_validate(comment)


comment_service = CommentService()
