"""
Petstagram Backend — Like SQLAlchemy Model
============================================

What:  ORM model for the `likes` table: one row per (post, user) pair.

Uniqueness:
    `uq_likes_post_user` guarantees at most one Like per (post_id, user_id)
    at the storage level, so concurrent double-taps from the same user can
    never produce two rows. LikeService inserts with ON CONFLICT DO NOTHING
    against this constraint.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from petstagram.database import Base

LIKE_UNIQUE_CONSTRAINT = "uq_likes_post_user"


class Like(Base):
    """A user's like on a post. Deleted on unlike."""

    __tablename__ = "likes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name=LIKE_UNIQUE_CONSTRAINT),
        Index("idx_likes_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Like(post_id={self.post_id}, user_id='{self.user_id}')>"
