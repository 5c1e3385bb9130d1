"""
Petstagram Backend — Comment SQLAlchemy Model
===============================================

What:  ORM model for the `comments` table.

Query Patterns:
    - Comments for a post in chronological order:
      SELECT ... WHERE post_id = :id ORDER BY created_at, id
      → served by idx_comments_post_created
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from petstagram.database import Base


class Comment(Base):
    """A comment left on a post. Text is editable; comments are never deleted."""

    __tablename__ = "comments"

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

    author_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_comments_post_created", "post_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, post_id={self.post_id}, author_id='{self.author_id}')>"
