"""Emoji reaction bookkeeping.

Each (post, user, emoji) triple is either present or absent; a toggle flips
it and keeps the post's denormalized ``total_reactions`` counter in step.
The unique constraint on the reactions table is the source of truth: when
two toggles race and both try to insert, the loser's insert fails inside a
savepoint and the request simply reports the state the winner produced.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Final

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.models import Post, Reaction

logger = logging.getLogger(__name__)

ALLOWED_EMOJIS: Final = ("👍", "❤️", "😂", "🎉", "🔥", "👏")


class UnsupportedEmojiError(ValueError):
    """Raised when a reaction uses an emoji outside the allow-list."""

    def __init__(self, emoji: str) -> None:
        super().__init__("Unsupported emoji")
        self.emoji = emoji


@dataclass(frozen=True)
class ReactionState:
    """Aggregate reaction state of one post after a toggle."""

    counts: dict[str, int]
    total_reactions: int
    reacted: bool


class ReactionLedger:
    """Reads and toggles reactions within a request-scoped session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def counts(self, post_id: uuid.UUID) -> dict[str, int]:
        """Return the number of reactions per emoji; absent emojis are omitted."""
        rows = self.db.execute(
            select(Reaction.emoji, func.count(Reaction.id))
            .where(Reaction.post_id == post_id)
            .group_by(Reaction.emoji)
        ).all()
        return {emoji: count for emoji, count in rows}

    def user_emojis(self, post_id: uuid.UUID, user_id: uuid.UUID) -> list[str]:
        """Return the emojis ``user_id`` currently has on the post."""
        return list(
            self.db.scalars(
                select(Reaction.emoji)
                .where(Reaction.post_id == post_id, Reaction.user_id == user_id)
                .order_by(Reaction.created_at)
            )
        )

    def _find(self, post_id: uuid.UUID, user_id: uuid.UUID, emoji: str) -> Reaction | None:
        return self.db.scalars(
            select(Reaction).where(
                Reaction.post_id == post_id,
                Reaction.user_id == user_id,
                Reaction.emoji == emoji,
            )
        ).first()

    def _adjust_total(self, post_id: uuid.UUID, delta: int) -> None:
        # Counter never drops below zero.
        adjusted = Post.total_reactions + delta
        self.db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(total_reactions=case((adjusted > 0, adjusted), else_=0))
            .execution_options(synchronize_session=False)
        )

    def _insert(self, post_id: uuid.UUID, user_id: uuid.UUID, emoji: str) -> bool:
        """Insert a reaction row; return False if an identical row already exists."""
        try:
            with self.db.begin_nested():
                self.db.add(Reaction(post_id=post_id, user_id=user_id, emoji=emoji))
        except IntegrityError:
            logger.info(
                "Reaction %s on post %s by user %s was recorded concurrently",
                emoji,
                post_id,
                user_id,
            )
            return False
        return True

    def toggle(self, post: Post, user_id: uuid.UUID, emoji: str) -> ReactionState:
        """Add the reaction if absent, remove it if present, and commit.

        Raises:
            UnsupportedEmojiError: If ``emoji`` is not in the allow-list. No
                state is changed in that case.
        """
        if emoji not in ALLOWED_EMOJIS:
            raise UnsupportedEmojiError(emoji)

        existing = self._find(post.id, user_id, emoji)
        if existing is None:
            reacted = True
            if self._insert(post.id, user_id, emoji):
                self._adjust_total(post.id, 1)
        else:
            reacted = False
            self.db.delete(existing)
            self._adjust_total(post.id, -1)

        self.db.commit()
        self.db.refresh(post)
        return ReactionState(
            counts=self.counts(post.id),
            total_reactions=post.total_reactions,
            reacted=reacted,
        )
