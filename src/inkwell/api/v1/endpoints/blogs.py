"""Blog post endpoints for the Inkwell API."""

import logging

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import desc, or_, update
from sqlalchemy.orm import Session

from inkwell.api.v1.dependencies import (
    AdminUserDep,
    CurrentUserDep,
    SessionDep,
    get_post_or_404,
)
from inkwell.core.settings import settings
from inkwell.models import Post, User
from inkwell.models.user import utcnow
from inkwell.schemas.blog import (
    AuthorOut,
    BlogCard,
    BlogCreated,
    BlogDetail,
    BlogDetailResponse,
    BlogEditResponse,
    BlogEditView,
    BlogListResponse,
    BlogWrite,
    MessageResponse,
)
from inkwell.services import content
from inkwell.services.feed import filter_by_tag, select_similar
from inkwell.services.permissions import can_mutate
from inkwell.utils.text import build_slug, join_tags, normalize_tags

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blogs", tags=["blogs"])

MAX_TITLE_LENGTH = 240
MAX_DESCRIPTION_LENGTH = 400


def to_card(post: Post) -> BlogCard:
    """Build the summary view of a post."""
    return BlogCard(
        blog_id=post.slug,
        title=post.title,
        description=post.description,
        tags=post.tags,
        author_name=post.author.full_name,
        author_username=post.author.username,
        author_image=post.author.profile_image,
        published_at=post.published_at,
        total_comments=post.total_comments,
        total_reactions=post.total_reactions,
        total_reads=post.total_reads,
        draft=post.draft,
    )


def _stored_blocks(post: Post) -> list[dict[str, str]]:
    return [
        content.block_to_dict(block)
        for block in content.denormalize(post.content_blocks_json, post.content)
    ]


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def _prepare_write(payload: BlogWrite) -> tuple[list[content.ContentBlock], list[str]]:
    """Validate a create/update payload and return its blocks and tags.

    Raises:
        HTTPException: 400 for an unknown block type, an overlong title or
            description or, when publishing, a missing title, description or
            body.
    """
    if len(payload.title.strip()) > MAX_TITLE_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Title must be at most {MAX_TITLE_LENGTH} characters",
        )
    if len(payload.description.strip()) > MAX_DESCRIPTION_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
        )

    raw_blocks = [block.model_dump() for block in payload.content_blocks or []]
    try:
        blocks = content.normalize(raw_blocks, payload.content)
    except content.UnknownBlockTypeError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err

    if not payload.draft and (
        not payload.title.strip() or not payload.description.strip() or not blocks
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title, description and content are required",
        )
    return blocks, normalize_tags(payload.tags)


def _apply_write(
    post: Post,
    payload: BlogWrite,
    blocks: list[content.ContentBlock],
    tags: list[str],
) -> None:
    post.title = payload.title.strip()
    post.description = payload.description.strip()
    post.content = payload.content
    post.content_blocks_json = content.serialize(blocks)
    post.banner = (payload.banner or "").strip()
    post.tags_csv = join_tags(tags)
    post.draft = payload.draft


@router.get("", response_model=BlogListResponse)
async def list_blogs(
    db: SessionDep,
    limit: int = Query(20, description="Maximum number of posts to return (1-50)"),
    tag: str | None = Query(None, description="Only return posts carrying this tag"),
) -> BlogListResponse:
    """List published posts, newest first.

    Args:
        db: Database session
        limit: Maximum number of posts, clamped to 1..50
        tag: Optional tag filter

    Returns:
        Card views of the matching posts
    """
    limit = max(1, min(limit, 50))
    query = db.query(Post).filter(Post.draft.is_(False)).order_by(desc(Post.published_at))

    wanted = normalize_tags([tag] if tag else [])
    if wanted:
        # LIKE narrows the candidates; filter_by_tag does the exact match.
        posts = filter_by_tag(query.filter(Post.tags_csv.contains(wanted[0])).all(), wanted[0])
    else:
        posts = query.limit(limit).all()

    return BlogListResponse(blogs=[to_card(post) for post in posts[:limit]])


@router.get("/mine", response_model=BlogListResponse)
async def list_my_blogs(
    db: SessionDep,
    current_user: AdminUserDep,
    limit: int = Query(50, description="Maximum number of posts to return (1-100)"),
) -> BlogListResponse:
    """List the caller's own posts, drafts included, most recently updated first."""
    limit = max(1, min(limit, 100))
    posts = (
        db.query(Post)
        .filter(Post.author_id == current_user.id)
        .order_by(desc(Post.updated_at))
        .limit(limit)
        .all()
    )
    return BlogListResponse(blogs=[to_card(post) for post in posts])


@router.post("", response_model=BlogCreated, status_code=status.HTTP_201_CREATED)
async def create_blog(
    payload: BlogWrite,
    response: Response,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> BlogCreated:
    """Create a post.

    Args:
        payload: Post fields
        response: Outgoing response, used to set the Location header
        db: Database session
        current_user: Authenticated user

    Returns:
        The slug of the new post

    Raises:
        HTTPException: 403 for non-admins, 400 for invalid content
    """
    if not current_user.is_admin:
        raise _forbidden("Only administrators can create blogs")

    blocks, tags = _prepare_write(payload)
    post = Post(slug=build_slug(payload.title), author_id=current_user.id)
    _apply_write(post, payload, blocks, tags)
    db.add(post)
    db.commit()
    db.refresh(post)

    logger.info("User %s created blog %s (draft=%s)", current_user.username, post.slug, post.draft)
    response.headers["Location"] = f"{settings.api_prefix}{router.prefix}/{post.slug}"
    return BlogCreated(blog_id=post.slug)



def _similar_candidates(db: Session, post: Post) -> list[Post]:
    """Return every other published post that may share a tag with ``post``.

    The substring match over the stored tag string is coarse; exact tag
    overlap is decided by ``select_similar``.
    """
    if not post.tags:
        return []
    return (
        db.query(Post)
        .filter(
            Post.draft.is_(False),
            Post.id != post.id,
            or_(*(Post.tags_csv.contains(tag, autoescape=True) for tag in post.tags)),
        )
        .order_by(desc(Post.published_at))
        .all()
    )


@router.get("/{slug}", response_model=BlogDetailResponse)
async def get_blog(slug: str, db: SessionDep) -> BlogDetailResponse:
    """Return a published post and its similar posts, counting the read."""
    post = get_post_or_404(db, slug, include_drafts=False)

    db.execute(
        update(Post)
        .where(Post.id == post.id)
        .values(total_reads=Post.total_reads + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(post)

    candidates = _similar_candidates(db, post)

    blog = BlogDetail(
        blog_id=post.slug,
        title=post.title,
        description=post.description,
        content=post.content,
        content_blocks=_stored_blocks(post),
        banner=post.banner,
        tags=post.tags,
        published_at=post.published_at,
        total_comments=post.total_comments,
        total_reactions=post.total_reactions,
        total_reads=post.total_reads,
        author=AuthorOut.model_validate(post.author),
    )
    return BlogDetailResponse(
        blog=blog,
        similar_blogs=[to_card(similar) for similar in select_similar(post, candidates)],
    )


def _get_owned_post(db: Session, slug: str, user: User, action: str) -> Post:
    post = get_post_or_404(db, slug)
    if not can_mutate(user, post):
        raise _forbidden(f"You can only {action} your own admin articles")
    return post


@router.get("/{slug}/edit", response_model=BlogEditResponse)
async def get_blog_for_edit(
    slug: str,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> BlogEditResponse:
    """Return the editable view of one of the caller's posts, drafts included."""
    post = _get_owned_post(db, slug, current_user, "edit")
    return BlogEditResponse(
        blog=BlogEditView(
            blog_id=post.slug,
            title=post.title,
            description=post.description,
            content=post.content,
            content_blocks=_stored_blocks(post),
            banner=post.banner,
            tags=post.tags,
            draft=post.draft,
            published_at=post.published_at,
            updated_at=post.updated_at,
        )
    )


@router.put("/{slug}", response_model=MessageResponse)
async def update_blog(
    slug: str,
    payload: BlogWrite,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> MessageResponse:
    """Replace the editable fields of one of the caller's posts.

    Raises:
        HTTPException: 404 for an unknown slug, 403 when the caller is not the
            post's admin author, 400 for invalid content
    """
    post = _get_owned_post(db, slug, current_user, "update")
    blocks, tags = _prepare_write(payload)
    _apply_write(post, payload, blocks, tags)
    post.updated_at = utcnow()
    db.commit()

    logger.info("User %s updated blog %s", current_user.username, post.slug)
    return MessageResponse(message="Blog updated")


@router.delete("/{slug}", response_model=MessageResponse)
async def delete_blog(slug: str, db: SessionDep, current_user: CurrentUserDep) -> MessageResponse:
    """Delete one of the caller's posts together with its comments and reactions."""
    post = _get_owned_post(db, slug, current_user, "delete")
    db.delete(post)
    db.commit()

    logger.info("User %s deleted blog %s", current_user.username, slug)
    return MessageResponse(message="Blog deleted")
