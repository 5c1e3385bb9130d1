"""
Petstagram Backend — Post SQLAlchemy Model
============================================

What:  ORM model representing the `posts` table.
Who:   Used by PostService for CRUD and by schema setup / Alembic.

Table Design:
    - UUID primary key, generated in Python so SQLite and PostgreSQL behave
      the same
    - photo_url: opaque URL or path supplied by the client
    - created_by: user identifier string (no users table in this service)
    - created_at: UTC with timezone

    isLiked is NOT a column. It depends on who is asking, so PostService
    derives it from the likes table at read time.

    Index on created_at DESC serves the feed query (newest first).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from petstagram.database import Base


class Post(Base):
    """
    A photo post in the feed.

    Lifecycle:
        Created by POST /api/posts. Caption and photo URL may be updated.
        Never deleted through the API; the likes and comments foreign keys
        cascade (ON DELETE CASCADE) if a post is removed by other means.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    caption: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    photo_url: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    created_by: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
        Index("idx_posts_created_by", "created_by"),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, created_by='{self.created_by}', "
            f"created_at='{self.created_at}')>"
        )
