"""Post ORM — persists blog posts and the URL of their optional image.

Invariants:
    - id is UUID primary key, generated client-side, never reused
    - heading is 3-200 chars, description >= 10 chars (CHECK constraints mirror
      the validation layer so no write path can bypass the bounds)
    - image is "" when the post has no image, never NULL
    - updated_at advances on every successful update (set explicitly by the
      repository, since an unchanged row emits no UPDATE for onupdate to hook)

Design Decisions:
    - Timestamps set in Python (default/onupdate) rather than server_default:
      identical behaviour on PostgreSQL and the SQLite test engine
    - created_at indexed: default listing order is created_at DESC
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from blog_api.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """A blog post with heading, description and optional image URL."""
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "length(heading) >= 3 AND length(heading) <= 200",
            name="ck_posts_heading_length",
        ),
        CheckConstraint(
            "length(description) >= 10",
            name="ck_posts_description_length",
        ),
        Index("ix_posts_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    heading: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(
        String(1024), nullable=False, default="",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
        onupdate=utcnow,
    )
