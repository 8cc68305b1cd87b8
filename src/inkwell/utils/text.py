"""Tag normalization and slug generation."""

from __future__ import annotations

import secrets
from collections.abc import Iterable
from typing import Final

MAX_TAGS: Final = 8
MAX_TAG_LENGTH: Final = 40
SLUG_FALLBACK: Final = "untitled"
SLUG_SUFFIX_LENGTH: Final = 6
MAX_SLUG_LENGTH: Final = 180
# Room for the hyphen and the random suffix.
MAX_SLUG_BASE_LENGTH: Final = MAX_SLUG_LENGTH - SLUG_SUFFIX_LENGTH - 1


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Trim, lowercase and deduplicate tags, keeping at most eight.

    Tags are stored comma-joined, so a raw tag containing commas counts as
    several tags. Each tag is cut to ``MAX_TAG_LENGTH`` characters. The first
    occurrence of a tag decides its position in the result.
    """
    normalized: list[str] = []
    seen: set[str] = set()
    for raw in tags or ():
        for part in raw.split(","):
            tag = part.strip().lower()[:MAX_TAG_LENGTH].rstrip()
            if not tag or tag in seen:
                continue
            seen.add(tag)
            normalized.append(tag)
            if len(normalized) == MAX_TAGS:
                return normalized
    return normalized


def split_tags(tags_csv: str | None) -> list[str]:
    """Split a stored comma-joined tag string back into a list."""
    if not tags_csv or not tags_csv.strip():
        return []
    return [part.strip() for part in tags_csv.split(",") if part.strip()]


def join_tags(tags: Iterable[str]) -> str:
    """Join tags for storage."""
    return ",".join(tags)


def build_slug_base(title: str | None) -> str:
    """Derive a URL-safe slug base from a post title.

    Words are split on whitespace, stripped of every non-alphanumeric
    character and joined with hyphens. Titles with no usable characters map
    to ``"untitled"``. Long bases are cut back to the last whole word that
    fits in ``MAX_SLUG_BASE_LENGTH``.
    """
    words = ("".join(ch for ch in word if ch.isalnum()) for word in (title or "").lower().split())
    slug_base = "-".join(word for word in words if word)
    if len(slug_base) > MAX_SLUG_BASE_LENGTH:
        cut = slug_base[: MAX_SLUG_BASE_LENGTH + 1]
        hyphen = cut.rfind("-")
        # A single overlong word has no hyphen to cut at.
        slug_base = cut[:hyphen] if hyphen > 0 else slug_base[:MAX_SLUG_BASE_LENGTH]
    return slug_base or SLUG_FALLBACK


def random_suffix(length: int = SLUG_SUFFIX_LENGTH) -> str:
    """Return ``length`` random lowercase hex characters."""
    return secrets.token_hex((length + 1) // 2)[:length]


def build_slug(title: str | None) -> str:
    """Return a slug base plus a random suffix, e.g. ``hello-world-3f9a1c``."""
    return f"{build_slug_base(title)}-{random_suffix()}"
