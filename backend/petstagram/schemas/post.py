"""
Petstagram Backend — Post Schemas
===================================

What:  Request and response models for posts.

isLiked:
    Computed per request for the viewer passed as `userId`; it is never
    stored. Without a viewer it is always false.
"""

import uuid
from typing import Optional

from pydantic import Field, model_validator

from petstagram.schemas.common import CamelModel, UTCDateTime


class PostCreate(CamelModel):
    """Body of POST /api/posts."""
    caption: str = Field(default="", max_length=2200)
    photo_url: Optional[str] = Field(default=None, max_length=1024)
    created_by: str = Field(min_length=1, max_length=255)
    created_at: Optional[UTCDateTime] = Field(
        default=None,
        description="Defaults to the time of insertion",
    )


class PostUpdate(CamelModel):
    """Body of PATCH /api/posts/{id}. At least one field is required."""
    caption: Optional[str] = Field(default=None, max_length=2200)
    photo_url: Optional[str] = Field(default=None, max_length=1024)

    @model_validator(mode="after")
    def require_a_field(self) -> "PostUpdate":
        if self.caption is None and self.photo_url is None:
            raise ValueError("Provide at least one of caption, photoUrl")
        return self


class PostResponse(CamelModel):
    """A post as the client sees it."""
    id: uuid.UUID
    caption: str
    photo_url: Optional[str] = None
    created_at: UTCDateTime
    created_by: str
    is_liked: bool = False
    like_count: int = 0
