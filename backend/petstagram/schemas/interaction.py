"""
Petstagram Backend — Like and Comment Schemas
===============================================
"""

import uuid

from pydantic import Field

from petstagram.schemas.common import CamelModel, UTCDateTime


# ── Likes ─────────────────────────────────────────────────────────────────


class LikeCreate(CamelModel):
    """Body of POST /api/posts/{id}/likes."""
    user_id: str = Field(min_length=1, max_length=255)


class LikeResponse(CamelModel):
    id: uuid.UUID
    post_id: uuid.UUID
    user_id: str
    created_at: UTCDateTime


# ── Comments ──────────────────────────────────────────────────────────────


class CommentCreate(CamelModel):
    """Body of POST /api/posts/{id}/comments."""
    author_id: str = Field(min_length=1, max_length=255)
    text: str = Field(min_length=1, max_length=2200)


class CommentUpdate(CamelModel):
    """Body of PATCH /api/comments/{id}."""
    text: str = Field(min_length=1, max_length=2200)


class CommentResponse(CamelModel):
    id: uuid.UUID
    post_id: uuid.UUID
    author_id: str
    text: str
    created_at: UTCDateTime
