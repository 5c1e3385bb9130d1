"""
Petstagram Backend — Like Service
===================================

What:  Like, unlike and list likes for a post.

Uniqueness under concurrency:
    add_like() issues a single
        INSERT ... ON CONFLICT (post_id, user_id) DO NOTHING RETURNING id
    against the `uq_likes_post_user` constraint. Two concurrent requests for
    the same pair both succeed and both end up looking at the same row; no
    check-then-insert window exists.

Unlike policy:
    delete_like() on a pair that has no Like raises NotFoundError. It is
    never a silent success.
"""

import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from petstagram.exceptions import NotFoundError, StorageError
from petstagram.models import Like
from petstagram.schemas.interaction import LikeResponse
from petstagram.services.post_service import require_post

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class LikeService:
    """Business logic layer for likes."""

    async def _find(self, db: AsyncSession, post_id: UUID, user_id: str):
        result = await db.execute(
            select(Like).where(Like.post_id == post_id, Like.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def add_like(
        self,
        db: AsyncSession,
        post_id: UUID,
        user_id: str,
    ) -> Tuple[LikeResponse, bool]:
        """
        Like a post. Idempotent per (post, user).

        Returns:
            (the Like row, True if this call inserted it)

        Raises:
            NotFoundError: the post does not exist
            StorageError: insert failed
        """
        await require_post(db, post_id)

        try:
            dialect = db.get_bind().dialect.name
            insert_fn = _UPSERT_INSERTS.get(dialect)
            if insert_fn is None:
                raise StorageError(
                    message="Likes are not supported on this database.",
                    context={"dialect": dialect},
                )
            stmt = (
                insert_fn(Like)
                .values(post_id=post_id, user_id=user_id)
                .on_conflict_do_nothing(index_elements=["post_id", "user_id"])
                .returning(Like.id)
            )
            inserted_id = (await db.execute(stmt)).scalar_one_or_none()
            like = await self._find(db, post_id, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error liking post %s: %s", post_id, str(e))
            raise StorageError(
                message="Could not like the post. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e

        created = inserted_id is not None
        if created:
            logger.info("User %s liked post %s", user_id, post_id)
        else:
            logger.debug("User %s already likes post %s", user_id, post_id)
        return LikeResponse.model_validate(like), created

    async def get_like(self, db: AsyncSession, post_id: UUID, user_id: str) -> LikeResponse:
        """Raises NotFoundError when the user has not liked the post."""
        try:
            like = await self._find(db, post_id, user_id)
        except SQLAlchemyError as e:
            raise StorageError(
                message="Could not retrieve the like. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e
        if like is None:
            raise NotFoundError(resource="like", resource_id=f"{post_id}/{user_id}")
        return LikeResponse.model_validate(like)

    async def list_likes(self, db: AsyncSession, post_id: UUID) -> List[LikeResponse]:
        """Likes on a post, oldest first."""
        await require_post(db, post_id)
        try:
            result = await db.execute(
                select(Like)
                .where(Like.post_id == post_id)
                .order_by(Like.created_at, Like.id)
            )
            likes = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing likes for %s: %s", post_id, str(e))
            raise StorageError(
                message="Could not retrieve likes. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e
        return [LikeResponse.model_validate(like) for like in likes]

    async def count_likes(self, db: AsyncSession, post_id: UUID) -> int:
        try:
            result = await db.execute(
                select(func.count(Like.id)).where(Like.post_id == post_id)
            )
        except SQLAlchemyError as e:
            raise StorageError(
                message="Could not count likes. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e
        return result.scalar() or 0

    async def delete_like(self, db: AsyncSession, post_id: UUID, user_id: str) -> None:
        """
        Unlike a post.

        Raises:
            NotFoundError: no Like for (post_id, user_id)
            StorageError: delete failed
        """
        try:
            like = await self._find(db, post_id, user_id)
            if like is not None:
                await db.delete(like)
                await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error unliking post %s: %s", post_id, str(e))
            raise StorageError(
                message="Could not unlike the post. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e

        if like is None:
            raise NotFoundError(resource="like", resource_id=f"{post_id}/{user_id}")
        logger.info("User %s unliked post %s", user_id, post_id)


like_service = LikeService()
