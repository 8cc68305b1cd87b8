# tests/v1/test_blogs.py
"""Tests for blog post endpoints."""

import json
import re
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status

from inkwell.models import Comment, Post, Reaction

BLOGS_URL = "/api/v1/blogs"


def _payload(**overrides):
    payload = {
        "title": "Hello World!",
        "description": "A first post",
        "content": "",
        "content_blocks": [
            {"type": "paragraph", "text": "Intro"},
            {"type": "code", "language": "python", "code": "print('hi')"},
        ],
        "tags": [" Python ", "WEB", "python"],
        "banner": "https://img.example.com/banner.png",
        "draft": False,
    }
    payload.update(overrides)
    return payload


class TestCreateBlog:
    def test_admin_creates_post(self, client, db_session, admin_headers) -> None:
        """Creating a post stores normalized blocks, tags and a suffixed slug."""
        response = client.post(BLOGS_URL, json=_payload(), headers=admin_headers)
        assert response.status_code == status.HTTP_201_CREATED

        slug = response.json()["blog_id"]
        assert re.fullmatch(r"hello-world-[0-9a-f]{6}", slug)
        assert response.headers["location"] == f"{BLOGS_URL}/{slug}"

        post = db_session.query(Post).filter(Post.slug == slug).one()
        assert post.tags == ["python", "web"]
        blocks = json.loads(post.content_blocks_json)
        assert [block["type"] for block in blocks] == ["paragraph", "code"]
        assert all(block["id"] for block in blocks)

    def test_legacy_content_becomes_paragraph(self, client, db_session, admin_headers) -> None:
        """Empty blocks plus legacy text store a single paragraph block."""
        response = client.post(
            BLOGS_URL,
            json=_payload(content="Hi there", content_blocks=[]),
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED

        post = db_session.query(Post).filter(Post.slug == response.json()["blog_id"]).one()
        blocks = json.loads(post.content_blocks_json)
        assert len(blocks) == 1
        assert blocks[0]["type"] == "paragraph"
        assert blocks[0]["text"] == "Hi there"

    def test_non_admin_forbidden(self, client, db_session, reader_headers) -> None:
        response = client.post(BLOGS_URL, json=_payload(), headers=reader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "Only administrators can create blogs"}
        assert db_session.query(Post).count() == 0

    def test_requires_authentication(self, client) -> None:
        response = client.post(BLOGS_URL, json=_payload())
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": "  "},
            {"description": ""},
            {"content": "", "content_blocks": [{"type": "paragraph", "text": " "}]},
        ],
    )
    def test_publishing_requires_fields(self, client, admin_headers, overrides) -> None:
        response = client.post(BLOGS_URL, json=_payload(**overrides), headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Title, description and content are required"}

    def test_draft_may_be_incomplete(self, client, admin_headers) -> None:
        response = client.post(
            BLOGS_URL,
            json={"title": "", "draft": True},
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["blog_id"].startswith("untitled-")

    def test_unknown_block_type(self, client, db_session, admin_headers) -> None:
        response = client.post(
            BLOGS_URL,
            json=_payload(content_blocks=[{"type": "video", "src": "https://v"}]),
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "video" in response.json()["error"]
        assert db_session.query(Post).count() == 0

    def test_long_title_gets_bounded_slug(self, client, db_session, admin_headers) -> None:
        response = client.post(BLOGS_URL, json=_payload(title="word " * 40), headers=admin_headers)
        assert response.status_code == status.HTTP_201_CREATED

        slug = response.json()["blog_id"]
        assert len(slug) <= 180
        assert re.fullmatch(r"(word-)+[0-9a-f]{6}", slug)

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"title": "t" * 241}, "Title must be at most 240 characters"),
            ({"description": "d" * 401}, "Description must be at most 400 characters"),
        ],
    )
    def test_overlong_fields_rejected(
        self, client, db_session, admin_headers, overrides, message
    ) -> None:
        response = client.post(BLOGS_URL, json=_payload(**overrides), headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": message}
        assert db_session.query(Post).count() == 0

    def test_comma_packed_tags_are_split_and_capped(
        self, client, db_session, admin_headers
    ) -> None:
        response = client.post(
            BLOGS_URL,
            json=_payload(tags=["a,b,c,d,e,f,g,h,i", "x,x"]),
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED

        post = db_session.query(Post).filter(Post.slug == response.json()["blog_id"]).one()
        assert post.tags == ["a", "b", "c", "d", "e", "f", "g", "h"]
        assert len(post.tags_csv) <= 1000

    def test_invalid_body_is_400(self, client, admin_headers) -> None:
        response = client.post(BLOGS_URL, json={"tags": "not-a-list"}, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "tags" in response.json()["error"]


class TestListBlogs:
    def test_lists_published_newest_first(self, client, make_post, admin_user) -> None:
        now = datetime.now(UTC)
        old = make_post(admin_user, title="Old", published_at=now - timedelta(days=2))
        new = make_post(admin_user, title="New", published_at=now - timedelta(hours=1))
        make_post(admin_user, title="Hidden", draft=True)

        response = client.get(BLOGS_URL)
        assert response.status_code == status.HTTP_200_OK

        blogs = response.json()["blogs"]
        assert [blog["blog_id"] for blog in blogs] == [new.slug, old.slug]
        card = blogs[0]
        assert card["author_name"] == admin_user.full_name
        assert card["author_username"] == admin_user.username
        assert card["total_reads"] == 0
        assert card["draft"] is False

    def test_limit_is_clamped(self, client, make_post, admin_user) -> None:
        for index in range(3):
            make_post(admin_user, title=f"Post {index}")
        assert len(client.get(BLOGS_URL, params={"limit": 0}).json()["blogs"]) == 1
        assert len(client.get(BLOGS_URL, params={"limit": 2}).json()["blogs"]) == 2
        assert len(client.get(BLOGS_URL, params={"limit": 500}).json()["blogs"]) == 3

    def test_tag_filter(self, client, make_post, admin_user) -> None:
        python = make_post(admin_user, title="Py", tags=["python"])
        make_post(admin_user, title="Pythonic", tags=["pythonic"])
        make_post(admin_user, title="Rust", tags=["rust"])

        blogs = client.get(BLOGS_URL, params={"tag": "Python"}).json()["blogs"]
        assert [blog["blog_id"] for blog in blogs] == [python.slug]


class TestMyBlogs:
    def test_includes_drafts_of_the_caller_only(
        self, client, make_post, admin_user, other_admin, admin_headers
    ) -> None:
        draft = make_post(admin_user, title="Draft", draft=True)
        published = make_post(admin_user, title="Live")
        make_post(other_admin, title="Someone else")

        blogs = client.get(f"{BLOGS_URL}/mine", headers=admin_headers).json()["blogs"]
        assert {blog["blog_id"] for blog in blogs} == {draft.slug, published.slug}

    def test_non_admin_forbidden(self, client, reader_headers) -> None:
        response = client.get(f"{BLOGS_URL}/mine", headers=reader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "Only administrators can manage blogs"}


class TestGetBlog:
    def test_detail_counts_the_read(self, client, published_post) -> None:
        response = client.get(f"{BLOGS_URL}/{published_post.slug}")
        assert response.status_code == status.HTTP_200_OK

        blog = response.json()["blog"]
        assert blog["blog_id"] == published_post.slug
        assert blog["total_reads"] == 1
        assert blog["tags"] == ["python", "web"]
        assert blog["content_blocks"][0]["type"] == "paragraph"
        assert blog["author"]["username"] == published_post.author.username

        again = client.get(f"{BLOGS_URL}/{published_post.slug}").json()["blog"]
        assert again["total_reads"] == 2

    def test_similar_blogs(self, client, make_post, admin_user, published_post) -> None:
        related = make_post(admin_user, title="Related", tags=["web"])
        make_post(admin_user, title="Unrelated", tags=["cooking"])
        make_post(admin_user, title="Draft related", tags=["python"], draft=True)

        similar = client.get(f"{BLOGS_URL}/{published_post.slug}").json()["similar_blogs"]
        assert [blog["blog_id"] for blog in similar] == [related.slug]

    def test_similar_blogs_reach_older_posts(self, client, make_post, admin_user) -> None:
        """A matching post is found however many newer unrelated posts exist."""
        now = datetime.now(UTC)
        old = make_post(
            admin_user, title="Old rust", tags=["rust"], published_at=now - timedelta(days=365)
        )
        for number in range(101):
            make_post(
                admin_user,
                title=f"Other {number}",
                tags=["other"],
                published_at=now - timedelta(minutes=200 - number),
            )
        target = make_post(admin_user, title="New rust", tags=["rust"], published_at=now)

        similar = client.get(f"{BLOGS_URL}/{target.slug}").json()["similar_blogs"]
        assert [blog["blog_id"] for blog in similar] == [old.slug]

    def test_similar_blogs_need_whole_tag_match(
        self, client, make_post, admin_user
    ) -> None:
        make_post(admin_user, title="Golang", tags=["golang"])
        target = make_post(admin_user, title="Go", tags=["go"])

        similar = client.get(f"{BLOGS_URL}/{target.slug}").json()["similar_blogs"]
        assert similar == []

    def test_draft_is_not_public(self, client, make_post, admin_user) -> None:
        draft = make_post(admin_user, title="Secret", draft=True)
        response = client.get(f"{BLOGS_URL}/{draft.slug}")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Blog not found"}

    def test_unknown_slug(self, client) -> None:
        response = client.get(f"{BLOGS_URL}/does-not-exist")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_corrupt_stored_blocks_fall_back(self, client, db_session, published_post) -> None:
        published_post.content_blocks_json = "{broken"
        published_post.content = "Legacy body"
        db_session.commit()

        blog = client.get(f"{BLOGS_URL}/{published_post.slug}").json()["blog"]
        assert [block["text"] for block in blog["content_blocks"]] == ["Legacy body"]


class TestEditBlog:
    def test_author_sees_draft(self, client, make_post, admin_user, admin_headers) -> None:
        draft = make_post(admin_user, title="Draft", draft=True)
        response = client.get(f"{BLOGS_URL}/{draft.slug}/edit", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["blog"]["draft"] is True

    def test_other_admin_forbidden(
        self, client, published_post, other_admin, auth_headers
    ) -> None:
        response = client.get(
            f"{BLOGS_URL}/{published_post.slug}/edit", headers=auth_headers(other_admin)
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "You can only edit your own admin articles"}


class TestUpdateBlog:
    def test_author_updates(self, client, db_session, published_post, admin_headers) -> None:
        original_published_at = published_post.published_at
        response = client.put(
            f"{BLOGS_URL}/{published_post.slug}",
            json=_payload(title="Renamed", tags=["new"]),
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_200_OK

        db_session.refresh(published_post)
        assert published_post.title == "Renamed"
        assert published_post.tags == ["new"]
        assert published_post.published_at == original_published_at
        assert published_post.updated_at >= original_published_at

    def test_non_admin_forbidden_and_row_unchanged(
        self, client, db_session, published_post, reader_headers
    ) -> None:
        before = (published_post.title, published_post.content_blocks_json, published_post.tags_csv)
        response = client.put(
            f"{BLOGS_URL}/{published_post.slug}",
            json=_payload(title="Hijacked"),
            headers=reader_headers,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "You can only update your own admin articles"}

        db_session.refresh(published_post)
        after = (published_post.title, published_post.content_blocks_json, published_post.tags_csv)
        assert after == before

    def test_publish_validation_applies(self, client, published_post, admin_headers) -> None:
        response = client.put(
            f"{BLOGS_URL}/{published_post.slug}",
            json=_payload(description=""),
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_slug(self, client, admin_headers) -> None:
        response = client.put(f"{BLOGS_URL}/missing", json=_payload(), headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDeleteBlog:
    def test_delete_cascades(
        self, client, db_session, published_post, reader, admin_headers
    ) -> None:
        db_session.add(Comment(post_id=published_post.id, user_id=reader.id, content="Nice"))
        db_session.add(Reaction(post_id=published_post.id, user_id=reader.id, emoji="👍"))
        db_session.commit()

        response = client.delete(f"{BLOGS_URL}/{published_post.slug}", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK

        assert db_session.query(Post).count() == 0
        assert db_session.query(Comment).count() == 0
        assert db_session.query(Reaction).count() == 0

    def test_other_admin_forbidden(
        self, client, db_session, published_post, other_admin, auth_headers
    ) -> None:
        response = client.delete(
            f"{BLOGS_URL}/{published_post.slug}", headers=auth_headers(other_admin)
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert db_session.query(Post).count() == 1
