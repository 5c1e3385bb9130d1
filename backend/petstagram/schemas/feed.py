"""
Petstagram Backend — Feed Payload Decoding
============================================

What:  Decodes an external feed payload: a JSON array of post objects with
       `photoUrl`, `createdAt` (ISO 8601) and `caption`.
How:   A pydantic TypeAdapter over List[FeedPost] validates the whole
       document in one pass.

All-or-nothing:
    A payload with the wrong shape fails as a whole. The array of bare
    strings `["bad json"]` raises ValidationError; it never decodes into an
    empty or partial list. Items keep the order they have in the payload,
    with no re-sorting by date.
"""

from typing import List, Optional, Union

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from petstagram.exceptions import ValidationError
from petstagram.schemas.common import CamelModel, UTCDateTime


class FeedPost(CamelModel):
    """One entry of a feed payload."""
    photo_url: Optional[str] = Field(default=None, max_length=1024)
    created_at: UTCDateTime
    caption: str = Field(max_length=2200)


_feed_adapter = TypeAdapter(List[FeedPost])


def decode_feed(payload: Union[str, bytes]) -> List[FeedPost]:
    """
    Decode a feed document into FeedPost records, in payload order.

    Raises:
        ValidationError: the payload is not a JSON array of post objects.
    """
    try:
        return _feed_adapter.validate_json(payload)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_input=False)
        raise ValidationError(
            message="Feed payload must be a JSON array of post objects",
            field="feed",
            context={"error_count": len(errors), "first_error": errors[0]["msg"] if errors else None},
        ) from e
