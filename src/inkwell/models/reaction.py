"""Models capturing emoji reactions on posts."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.db.session import Base

from .user import utcnow

if TYPE_CHECKING:
    from .post import Post
    from .user import User


class Reaction(Base):
    """One user's emoji on one post.

    Rows are inserted and deleted by toggling, never updated.
    """

    __tablename__ = "reactions"
    __table_args__ = (
        # The storage-level guard against duplicate reactions from racing toggles.
        UniqueConstraint("post_id", "user_id", "emoji", name="uq_reactions_post_user_emoji"),
        Index("ix_reactions_post_id", "post_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("blog_posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    emoji: Mapped[str] = mapped_column(String(8), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    post: Mapped[Post] = relationship("Post", back_populates="reactions")
    user: Mapped[User] = relationship("User", back_populates="reactions")
