"""
Petstagram Backend — Post Service
===================================

What:  Create, read, update and list posts; import decoded feed payloads.
Who:   Called by the posts router; `require_post` is shared with the like
       and comment services.

Derived fields:
    Every read selects two correlated subqueries next to the Post row:
        like_count = SELECT count(*) FROM likes WHERE likes.post_id = posts.id
        is_liked   = EXISTS (SELECT ... WHERE post_id = posts.id AND user_id = :viewer)
    so a post and its like state come back in one round trip and can never
    disagree with the likes table.

Error Handling:
    SQLAlchemy errors are wrapped in StorageError (details go to the log
    and the exception context, never to the client). NotFoundError is
    raised outside the try blocks and propagates as-is.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc, exists, func, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from petstagram.exceptions import NotFoundError, StorageError
from petstagram.models import Like, Post
from petstagram.schemas.feed import FeedPost
from petstagram.schemas.post import PostCreate, PostResponse, PostUpdate

logger = logging.getLogger(__name__)


async def require_post(db: AsyncSession, post_id: UUID) -> Post:
    """Load a post by primary key or raise NotFoundError."""
    try:
        post = await db.get(Post, post_id)
    except SQLAlchemyError as e:
        logger.error("Database error fetching post %s: %s", post_id, str(e))
        raise StorageError(
            message="Could not retrieve the post. Please try again.",
            context={"post_id": str(post_id), "error_type": type(e).__name__},
        ) from e
    if post is None:
        raise NotFoundError(resource="post", resource_id=str(post_id))
    return post


def _to_response(post: Post, like_count: int, is_liked: bool) -> PostResponse:
    return PostResponse(
        id=post.id,
        caption=post.caption,
        photo_url=post.photo_url,
        created_at=post.created_at,
        created_by=post.created_by,
        is_liked=bool(is_liked),
        like_count=int(like_count or 0),
    )


class PostService:
    """
    Business logic layer for posts.

    Responsibilities:
        - create_post(): insert with server-assigned id
        - get_post(): single post with derived isLiked / likeCount
        - list_posts(): feed, newest first, with total count
        - update_post(): caption / photo URL edits
        - import_feed(): bulk insert of a decoded feed payload
    """

    def _select_with_likes(self, viewer_id: Optional[str]):
        like_count = (
            select(func.count(Like.id))
            .where(Like.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
            .label("like_count")
        )
        if viewer_id is None:
            is_liked = literal(False).label("is_liked")
        else:
            is_liked = (
                exists()
                .where(Like.post_id == Post.id, Like.user_id == viewer_id)
                .label("is_liked")
            )
        return select(Post, like_count, is_liked)

    async def create_post(self, db: AsyncSession, data: PostCreate) -> PostResponse:
        """
        Insert a new post.

        Returns:
            PostResponse with the assigned id; isLiked false, likeCount 0.

        Raises:
            StorageError: insert failed (connection loss, constraint violation)
        """
        post = Post(
            caption=data.caption,
            photo_url=data.photo_url,
            created_by=data.created_by,
        )
        if data.created_at is not None:
            post.created_at = data.created_at

        try:
            db.add(post)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating post: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not create the post. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Post %s created by %s", post.id, post.created_by)
        return _to_response(post, like_count=0, is_liked=False)

    async def get_post(
        self,
        db: AsyncSession,
        post_id: UUID,
        viewer_id: Optional[str] = None,
    ) -> PostResponse:
        """
        Retrieve one post by id.

        Raises:
            NotFoundError: no post with that id (→ 404)
            StorageError: query failed (→ 500)
        """
        try:
            result = await db.execute(
                self._select_with_likes(viewer_id).where(Post.id == post_id)
            )
            row = result.one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise StorageError(
                message="Could not retrieve the post. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e

        if row is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))

        post, like_count, is_liked = row
        return _to_response(post, like_count, is_liked)

    async def list_posts(
        self,
        db: AsyncSession,
        viewer_id: Optional[str] = None,
        created_by: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[PostResponse], int]:
        """
        The feed: posts ordered by created_at descending (ties by id).

        Args:
            viewer_id: user whose likes drive isLiked
            created_by: only posts by this user

        Returns:
            (page of posts, total number of posts matching the filter)
        """
        query = self._select_with_likes(viewer_id)
        count_query = select(func.count(Post.id))
        if created_by is not None:
            query = query.where(Post.created_by == created_by)
            count_query = count_query.where(Post.created_by == created_by)
        query = query.order_by(desc(Post.created_at), desc(Post.id)).limit(limit).offset(offset)

        try:
            result = await db.execute(query)
            rows = result.all()
            total = (await db.execute(count_query)).scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        posts = [_to_response(post, like_count, is_liked) for post, like_count, is_liked in rows]
        return posts, total

    async def update_post(
        self,
        db: AsyncSession,
        post_id: UUID,
        data: PostUpdate,
        viewer_id: Optional[str] = None,
    ) -> PostResponse:
        """
        Apply caption / photo URL changes.

        Returns:
            The updated post, with isLiked computed for viewer_id.

        Raises:
            NotFoundError: no post with that id
            StorageError: update failed
        """
        post = await require_post(db, post_id)
        if data.caption is not None:
            post.caption = data.caption
        if data.photo_url is not None:
            post.photo_url = data.photo_url

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating post %s: %s", post_id, str(e))
            raise StorageError(
                message="Could not update the post. Please try again.",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            ) from e

        logger.info("Post %s updated", post_id)
        return await self.get_post(db, post_id, viewer_id=viewer_id)

    async def import_feed(
        self,
        db: AsyncSession,
        feed: List[FeedPost],
        created_by: str,
    ) -> List[PostResponse]:
        """Insert every decoded feed entry as a post, keeping payload order."""
        posts = [
            Post(
                caption=item.caption,
                photo_url=item.photo_url,
                created_at=item.created_at,
                created_by=created_by,
            )
            for item in feed
        ]
        try:
            db.add_all(posts)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error importing feed: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not import the feed. Please try again.",
                context={"count": len(posts), "error_type": type(e).__name__},
            ) from e

        logger.info("Imported %d posts for %s", len(posts), created_by)
        return [_to_response(post, like_count=0, is_liked=False) for post in posts]


post_service = PostService()
