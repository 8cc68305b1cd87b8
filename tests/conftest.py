# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("SEED_DEMO_CONTENT", "false")

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from inkwell.core.security import hash_password  # noqa: E402
from inkwell.db.session import Base, build_engine  # noqa: E402
from inkwell.db.session import get_db as app_get_session  # noqa: E402
from inkwell.main import app as fastapi_app  # noqa: E402
from inkwell.models import Post, User  # noqa: E402
from inkwell.services import content  # noqa: E402
from inkwell.services.accounts import issue_token  # noqa: E402
from inkwell.services.google import (  # noqa: E402
    GoogleIdentity,
    GoogleTokenError,
    GoogleTokenVerifier,
    get_google_verifier,
)
from inkwell.utils.text import build_slug, join_tags  # noqa: E402

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse"
TEST_GOOGLE_CLIENT_ID = "test-client.apps.googleusercontent.com"

_USER_COUNTER = count(1)
# Hashing is slow; every fixture user shares one hash.
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)

    # pysqlite only honours SAVEPOINT once it stops managing transactions itself.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users directly."""

    def _make_user(*, full_name: str = "Test User", is_admin: bool = False) -> User:
        number = next(_USER_COUNTER)
        user = User(
            full_name=full_name,
            email=f"user{number}@example.com",
            username=f"user{number}",
            password_hash=_TEST_PASSWORD_HASH,
            profile_image=f"https://img.example.com/user{number}.png",
            is_admin=is_admin,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted administrator."""
    return make_user(full_name="Ada Admin", is_admin=True)


@pytest.fixture()
def other_admin(make_user: Callable[..., User]) -> User:
    """Create and return a second administrator."""
    return make_user(full_name="Grace Admin", is_admin=True)


@pytest.fixture()
def reader(make_user: Callable[..., User]) -> User:
    """Create and return a non-admin user."""
    return make_user(full_name="Rita Reader")


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for any user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(user)}"}

    return _headers


@pytest.fixture()
def admin_headers(
    admin_user: User,
    auth_headers: Callable[[User], dict[str, str]],
) -> dict[str, str]:
    """Return authorization headers for the administrator."""
    return auth_headers(admin_user)


@pytest.fixture()
def reader_headers(
    reader: User,
    auth_headers: Callable[[User], dict[str, str]],
) -> dict[str, str]:
    """Return authorization headers for the non-admin user."""
    return auth_headers(reader)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory that persists posts directly."""

    def _make_post(
        author: User,
        *,
        title: str = "A post",
        tags: list[str] | None = None,
        draft: bool = False,
        text: str = "Body text",
        **fields: Any,
    ) -> Post:
        blocks = content.normalize([{"type": "paragraph", "text": text}])
        post = Post(
            slug=build_slug(title),
            title=title,
            description=f"About {title}",
            content=text,
            content_blocks_json=content.serialize(blocks),
            tags_csv=join_tags(tags or []),
            draft=draft,
            author_id=author.id,
            **fields,
        )
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture()
def published_post(make_post: Callable[..., Post], admin_user: User) -> Post:
    """Create a baseline published post."""
    return make_post(admin_user, title="Hello World", tags=["python", "web"])


class FakeGoogleVerifier(GoogleTokenVerifier):
    """Verifier that accepts a fixed table of tokens instead of calling Google."""

    def __init__(self, identities: dict[str, GoogleIdentity], client_ids: list[str]) -> None:
        super().__init__(client_ids=client_ids, certs_url="https://certs.invalid")
        self.identities = identities

    def verify(self, id_token: str) -> GoogleIdentity:
        try:
            return self.identities[id_token]
        except KeyError as err:
            raise GoogleTokenError("unknown token") from err


@pytest.fixture()
def google_identities() -> dict[str, GoogleIdentity]:
    """Tokens the fake verifier accepts, keyed by token string."""
    return {}


@pytest.fixture()
def fake_google(
    app: FastAPI,
    google_identities: dict[str, GoogleIdentity],
) -> Iterator[FakeGoogleVerifier]:
    """Replace the Google verifier dependency with a configured fake."""
    verifier = FakeGoogleVerifier(google_identities, [TEST_GOOGLE_CLIENT_ID])
    app.dependency_overrides[get_google_verifier] = lambda: verifier
    try:
        yield verifier
    finally:
        app.dependency_overrides.pop(get_google_verifier, None)


@pytest.fixture()
def unconfigured_google(app: FastAPI) -> Iterator[GoogleTokenVerifier]:
    """Replace the Google verifier with one that has no client IDs."""
    verifier = GoogleTokenVerifier(client_ids=[], certs_url="https://certs.invalid")
    app.dependency_overrides[get_google_verifier] = lambda: verifier
    try:
        yield verifier
    finally:
        app.dependency_overrides.pop(get_google_verifier, None)
