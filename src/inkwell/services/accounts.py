"""Account creation and lookup helpers shared by the auth endpoints."""
from __future__ import annotations

import logging
import secrets
from urllib.parse import quote

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from inkwell.core import security
from inkwell.core.settings import settings
from inkwell.models import User
from inkwell.utils.text import random_suffix

__all__ = [
    "avatar_url",
    "create_user",
    "generate_unique_username",
    "get_user_by_email",
    "issue_token",
    "normalize_email",
    "random_username",
    "should_be_admin",
]

logger = logging.getLogger(__name__)

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/6.x/notionists-neutral/svg?seed={seed}"


def normalize_email(email: str) -> str:
    """Return the canonical (trimmed, lowercased) form of an email."""
    return email.strip().lower()


def avatar_url(seed: str) -> str:
    """Return a generated avatar URL for ``seed``."""
    return AVATAR_URL_TEMPLATE.format(seed=quote(seed, safe=""))


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return the user owning ``email`` (case-insensitive)."""
    return db.scalars(select(User).where(User.email == normalize_email(email))).first()


def should_be_admin(db: Session, email: str) -> bool:
    """Decide whether a new account gets the admin flag.

    With ``OWNER_EMAIL`` configured only that address becomes admin;
    otherwise the first account ever created does.
    """
    if settings.owner_email:
        return normalize_email(email) == settings.owner_email
    return not db.scalar(select(exists().where(User.is_admin.is_(True))))


def _username_seed(email: str) -> str:
    local_part = normalize_email(email).split("@", 1)[0]
    seed = "".join(ch for ch in local_part if ch.isalnum())
    return seed or "user"


def random_username(email: str) -> str:
    """Return the email-derived username seed plus a random suffix."""
    return f"{_username_seed(email)}-{random_suffix()}"


def generate_unique_username(db: Session, email: str) -> str:
    """Return the first free username among ``seed``, ``seed-01``, ``seed-02``…"""
    base_username = _username_seed(email)
    taken = set(db.scalars(select(User.username).where(User.username.like(f"{base_username}%"))))
    username = base_username
    attempt = 0
    while username in taken:
        attempt += 1
        username = f"{base_username}-{attempt:02d}"
    return username


def create_user(
    db: Session,
    *,
    full_name: str,
    email: str,
    username: str,
    password: str | None,
    profile_image: str | None = None,
) -> User:
    """Persist a new user and return it.

    A ``None`` password stores the hash of a random secret, leaving the
    account usable only through federated sign-in.
    """
    email = normalize_email(email)
    user = User(
        full_name=full_name,
        email=email,
        username=username,
        password_hash=security.hash_password(password or secrets.token_hex(16)),
        is_admin=should_be_admin(db, email),
        profile_image=profile_image or avatar_url(username),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (admin=%s)", user.username, user.is_admin)
    return user


def issue_token(user: User) -> str:
    """Create the bearer token carrying the user's public claims."""
    return security.create_access_token(
        str(user.id),
        extra_claims={
            "email": user.email,
            "username": user.username,
            "is_admin": user.is_admin,
        },
    )
