"""
Petstagram Backend — Like Route Handlers
==========================================

What:  Like / unlike a post and list its likes.
Who:   The feed cell's like button (toggle between POST and DELETE).

Status codes:
    POST   201 when the like was created, 200 when it already existed
    DELETE 204 on success, 404 when the user had not liked the post
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from petstagram.database import get_db_session
from petstagram.schemas.common import ErrorResponse
from petstagram.schemas.interaction import LikeCreate, LikeResponse
from petstagram.services.like_service import like_service

router = APIRouter(prefix="/api/posts/{post_id}/likes", tags=["Likes"])


@router.get(
    "",
    response_model=list[LikeResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="List likes on a post, oldest first",
)
async def list_likes(
    post_id: UUID,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> list[LikeResponse]:
    likes = await like_service.list_likes(db=db, post_id=post_id)
    response.headers["X-Total-Count"] = str(len(likes))
    return likes


@router.post(
    "",
    status_code=201,
    response_model=LikeResponse,
    responses={
        200: {"description": "Already liked", "model": LikeResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Like a post",
)
async def add_like(
    post_id: UUID,
    body: LikeCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    like, created = await like_service.add_like(db=db, post_id=post_id, user_id=body.user_id)
    if not created:
        response.status_code = 200
    return like


@router.delete(
    "/{user_id}",
    status_code=204,
    responses={404: {"description": "Like not found", "model": ErrorResponse}},
    summary="Unlike a post",
)
async def delete_like(
    post_id: UUID,
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await like_service.delete_like(db=db, post_id=post_id, user_id=user_id)
    return Response(status_code=204)
