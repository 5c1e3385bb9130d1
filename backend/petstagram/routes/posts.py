"""
Petstagram Backend — Post Route Handlers
==========================================

What:  Feed listing, post creation, post detail, post edits and feed import.
Who:   Called by the mobile client's feed screen and by seeding scripts.

Viewer:
    `userId` on the read endpoints names the user looking at the feed;
    isLiked in the response is computed for that user.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from petstagram.database import get_db_session
from petstagram.schemas.common import ErrorResponse
from petstagram.schemas.feed import decode_feed
from petstagram.schemas.post import PostCreate, PostResponse, PostUpdate
from petstagram.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Posts"])


@router.get(
    "/posts",
    response_model=list[PostResponse],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List the feed, newest first",
)
async def list_posts(
    response: Response,
    viewer_id: str | None = Query(
        default=None,
        alias="userId",
        description="User viewing the feed; drives isLiked",
    ),
    created_by: str | None = Query(
        default=None,
        alias="createdBy",
        description="Only posts created by this user",
    ),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> list[PostResponse]:
    """
    The feed as a bare JSON array. The total number of matching posts is
    returned in the X-Total-Count header.
    """
    posts, total = await post_service.list_posts(
        db=db,
        viewer_id=viewer_id,
        created_by=created_by,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(total)
    return posts


@router.post(
    "/posts",
    status_code=201,
    response_model=PostResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    body: PostCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(db=db, data=body)


@router.get(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single post",
)
async def get_post(
    post_id: UUID,
    viewer_id: str | None = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.get_post(db=db, post_id=post_id, viewer_id=viewer_id)


@router.patch(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Edit a post's caption or photo URL",
)
async def update_post(
    post_id: UUID,
    body: PostUpdate,
    viewer_id: str | None = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_post(
        db=db, post_id=post_id, data=body, viewer_id=viewer_id
    )


@router.post(
    "/feed/import",
    status_code=201,
    response_model=list[PostResponse],
    responses={400: {"description": "Malformed feed payload", "model": ErrorResponse}},
    summary="Import a feed payload as posts",
    description=(
        "Accepts a JSON array of {photoUrl, createdAt, caption} objects. "
        "A payload of any other shape is rejected as a whole; nothing is imported."
    ),
)
async def import_feed(
    request: Request,
    created_by: str = Query(alias="createdBy", min_length=1, max_length=255),
    db: AsyncSession = Depends(get_db_session),
) -> list[PostResponse]:
    # Decoded here rather than as a typed body so a bad payload maps to our
    # 400 ValidationError instead of FastAPI's 422
    payload = await request.body()
    feed = decode_feed(payload)
    logger.info("Importing feed of %d posts for %s", len(feed), created_by)
    return await post_service.import_feed(db=db, feed=feed, created_by=created_by)
