"""SQLAlchemy model for blog posts."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.db.session import Base
from inkwell.utils.text import split_tags

from .user import utcnow

if TYPE_CHECKING:
    from .comment import Comment
    from .reaction import Reaction
    from .user import User


class Post(Base):
    """Article authored by an admin.

    The body is kept twice: ``content`` holds the legacy plain text and
    ``content_blocks_json`` the canonical, normalized block list. Tags are
    stored comma-joined. The three ``total_*`` counters are denormalized
    display values.
    """

    __tablename__ = "blog_posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(String(180), unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(240), nullable=False, default="")
    description: Mapped[str] = mapped_column(String(400), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_blocks_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    banner: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tags_csv: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    draft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    total_reads: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_comments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_reactions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    author: Mapped[User] = relationship("User", back_populates="posts")
    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reactions: Mapped[list[Reaction]] = relationship(
        "Reaction",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def tags(self) -> list[str]:
        """Return the stored tags as a list."""
        return split_tags(self.tags_csv)
