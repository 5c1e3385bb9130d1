"""
Petstagram Backend — UserAuthentication SQLAlchemy Model
==========================================================

What:  ORM model for the `user_authentications` table: credential material
       for a user identifier.

Only the salted hash is stored (see services/user_auth_service.py for the
format). Token issuance lives outside this service.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from petstagram.database import Base


class UserAuthentication(Base):
    """Hashed credentials for one user ID."""

    __tablename__ = "user_authentications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        # password_hash deliberately left out
        return f"<UserAuthentication(id={self.id}, user_id='{self.user_id}')>"
