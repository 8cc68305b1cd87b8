"""Authorization rules for post mutation."""

from __future__ import annotations

from inkwell.models import Post, User


def can_mutate(user: User | None, post: Post) -> bool:
    """Return True iff ``user`` is an admin and authored ``post``."""
    return user is not None and user.is_admin and post.author_id == user.id
