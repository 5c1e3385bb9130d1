"""
Petstagram Backend — Comment Route Handlers
=============================================

What:  List and add comments on a post; edit a comment.
Who:   The comment list screen opened from a feed cell.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from petstagram.database import get_db_session
from petstagram.schemas.common import ErrorResponse
from petstagram.schemas.interaction import CommentCreate, CommentResponse, CommentUpdate
from petstagram.services.comment_service import comment_service

router = APIRouter(prefix="/api", tags=["Comments"])


@router.get(
    "/posts/{post_id}/comments",
    response_model=list[CommentResponse],
    responses={
        400: {"description": "Invalid order", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="List comments on a post",
)
async def list_comments(
    post_id: UUID,
    request: Request,
    order: str | None = Query(
        default=None,
        description="'asc' (oldest first) or 'desc', case-insensitive; defaults to COMMENT_ORDER",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> list[CommentResponse]:
    direction = (order or request.app.state.settings.comment_order).lower()
    return await comment_service.list_comments(db=db, post_id=post_id, order=direction)


@router.post(
    "/posts/{post_id}/comments",
    status_code=201,
    response_model=CommentResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Comment on a post",
)
async def create_comment(
    post_id: UUID,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(
        db=db,
        post_id=post_id,
        author_id=body.author_id,
        text=body.text,
    )


@router.patch(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    responses={404: {"description": "Comment not found", "model": ErrorResponse}},
    summary="Edit a comment",
)
async def update_comment(
    comment_id: UUID,
    body: CommentUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.update_comment(db=db, comment_id=comment_id, text=body.text)
