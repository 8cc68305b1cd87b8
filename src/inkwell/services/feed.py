"""Selection helpers for the public feed and the "similar posts" rail."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from inkwell.models import Post
from inkwell.utils.text import normalize_tags

SIMILAR_POSTS_LIMIT: Final = 6


def select_similar(
    target: Post,
    candidates: Iterable[Post],
    limit: int = SIMILAR_POSTS_LIMIT,
) -> list[Post]:
    """Return published posts sharing at least one tag with ``target``.

    Drafts and the target itself are never returned. Results are ordered by
    ``published_at`` descending and capped at ``limit``.
    """
    target_tags = set(target.tags)
    if not target_tags or limit <= 0:
        return []

    similar = [
        post
        for post in candidates
        if not post.draft and post.id != target.id and target_tags.intersection(post.tags)
    ]
    similar.sort(key=lambda post: post.published_at, reverse=True)
    return similar[:limit]


def filter_by_tag(posts: Iterable[Post], tag: str | None) -> list[Post]:
    """Keep posts carrying ``tag``; a blank tag keeps everything."""
    wanted = normalize_tags([tag] if tag else [])
    if not wanted:
        return list(posts)
    return [post for post in posts if wanted[0] in post.tags]
