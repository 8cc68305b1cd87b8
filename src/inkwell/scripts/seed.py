"""Populate an empty database with demo authors, posts, comments and reactions."""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from inkwell.core.security import hash_password
from inkwell.db.session import SessionLocal, create_tables
from inkwell.models import Comment, Post, Reaction, User
from inkwell.models.user import utcnow
from inkwell.services import content
from inkwell.services.accounts import avatar_url
from inkwell.utils.text import join_tags

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "ChangeMe123!"

DEMO_USERS = (
    # (username, full name, admin)
    ("inkwell-owner", "Inkwell Admin", True),
    ("thabo", "Thabo M", False),
    ("neo", "Neo K", False),
    ("lele", "Lele M", False),
)


@dataclass
class DemoPost:
    slug: str
    title: str
    description: str
    tags: list[str]
    blocks: list[dict[str, str]]
    days_ago: int
    reads: int
    comments: list[tuple[str, str]] = field(default_factory=list)
    reactions: list[tuple[str, str]] = field(default_factory=list)


DEMO_POSTS = (
    DemoPost(
        slug="solid-principles-python-101",
        title="SOLID Principles in Python with Practical Examples",
        description="A walk-through of the SOLID principles using small Python examples.",
        tags=["python", "architecture", "backend"],
        blocks=[
            {"type": "paragraph", "text": "SOLID is a set of design principles that keeps software easy to change."},
            {
                "type": "image",
                "src": "https://images.unsplash.com/photo-1518770660439-4636190af475?auto=format&fit=crop&w=1400&q=80",
                "alt": "Code architecture",
            },
            {
                "type": "paragraph",
                "text": "In Python they show up in how we shape protocols, services and dependency boundaries.",
            },
            {
                "type": "code",
                "language": "python",
                "code": (
                    "class Notifier(Protocol):\n"
                    "    def send(self, message: str) -> None: ...\n\n\n"
                    "class OrderService:\n"
                    "    def __init__(self, notifier: Notifier) -> None:\n"
                    "        self.notifier = notifier\n"
                ),
            },
        ],
        days_ago=1,
        reads=94,
        comments=[
            ("thabo", "Great explanation of dependency inversion."),
            ("neo", "Would love a follow-up on clean architecture."),
        ],
        reactions=[("thabo", "👍"), ("neo", "🔥"), ("lele", "👍")],
    ),
    DemoPost(
        slug="deploying-python-apis-checklist",
        title="Deploying Python APIs to the Cloud: A Practical Checklist",
        description="A concise checklist for shipping reliable Python APIs.",
        tags=["cloud", "devops", "python"],
        blocks=[
            {
                "type": "paragraph",
                "text": "Cloud deployments succeed when you design for observability, failure and repeatability.",
            },
            {"type": "paragraph", "text": "Start with health checks, centralized logs and CI/CD pipelines."},
            {
                "type": "code",
                "language": "yaml",
                "code": "healthChecks:\n  - path: /health\n    intervalSeconds: 30\n",
            },
        ],
        days_ago=3,
        reads=76,
        comments=[("lele", "This helped us fix our readiness checks.")],
        reactions=[("neo", "🎉")],
    ),
    DemoPost(
        slug="frontend-performance-patterns",
        title="Frontend Performance Patterns That Actually Matter",
        description="Measurable optimizations: rendering boundaries, memoization and payload control.",
        tags=["frontend", "performance"],
        blocks=[
            {
                "type": "paragraph",
                "text": "Optimize where users feel latency first: route transitions and large lists.",
            },
            {"type": "paragraph", "text": "Measure before and after each change with browser profiling."},
        ],
        days_ago=5,
        reads=58,
        reactions=[("thabo", "❤️")],
    ),
)


def _get_or_create_user(db: Session, username: str, full_name: str, is_admin: bool) -> User:
    email = f"{username}@inkwell.local"
    user = db.scalars(select(User).where(User.email == email)).first()
    if user is not None:
        return user
    user = User(
        email=email,
        username=username,
        full_name=full_name,
        password_hash=hash_password(DEMO_PASSWORD),
        profile_image=avatar_url(username),
        is_admin=is_admin,
    )
    db.add(user)
    db.flush()
    return user


def seed_demo_content(db: Session) -> bool:
    """Insert demo content unless the database already holds posts.

    Returns:
        True when content was inserted.
    """
    if db.scalars(select(Post.id).limit(1)).first() is not None:
        logger.info("Posts already exist; skipping demo content")
        return False

    users = {
        username: _get_or_create_user(db, username, full_name, is_admin)
        for username, full_name, is_admin in DEMO_USERS
    }
    owner = users["inkwell-owner"]
    now = utcnow()

    for demo in DEMO_POSTS:
        blocks = content.normalize(demo.blocks)
        published_at = now - timedelta(days=demo.days_ago)
        post = Post(
            slug=demo.slug,
            title=demo.title,
            description=demo.description,
            content="\n\n".join(
                block.text for block in blocks if isinstance(block, content.ParagraphBlock)
            ),
            content_blocks_json=content.serialize(blocks),
            tags_csv=join_tags(demo.tags),
            draft=False,
            total_reads=demo.reads,
            total_comments=len(demo.comments),
            total_reactions=len(demo.reactions),
            author_id=owner.id,
            published_at=published_at,
            updated_at=published_at,
        )
        db.add(post)
        db.flush()

        for offset, (username, text) in enumerate(demo.comments):
            db.add(
                Comment(
                    post_id=post.id,
                    user_id=users[username].id,
                    content=text,
                    commented_at=published_at + timedelta(hours=offset + 1),
                )
            )
        for username, emoji in demo.reactions:
            db.add(Reaction(post_id=post.id, user_id=users[username].id, emoji=emoji))

    db.commit()
    logger.info("Seeded %d demo posts", len(DEMO_POSTS))
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the Inkwell database with demo content.")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    if args.create_tables:
        create_tables()
    with SessionLocal() as db:
        seed_demo_content(db)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
