"""Comment endpoints for the Inkwell API."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import desc, update

from inkwell.api.v1.dependencies import CurrentUserDep, SessionDep, get_post_or_404
from inkwell.models import Comment, Post
from inkwell.schemas.blog import AuthorOut
from inkwell.schemas.comment import CommentCreate, CommentListResponse, CommentOut

router = APIRouter(prefix="/blogs/{slug}/comments", tags=["comments"])

MAX_COMMENT_LENGTH = 1000


def _to_out(comment: Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        comment=comment.content,
        commented_at=comment.commented_at,
        user=AuthorOut.model_validate(comment.user),
    )


@router.get("", response_model=CommentListResponse)
async def list_comments(slug: str, db: SessionDep) -> CommentListResponse:
    """List a post's comments, newest first."""
    post = get_post_or_404(db, slug, include_drafts=False)
    comments = (
        db.query(Comment)
        .filter(Comment.post_id == post.id)
        .order_by(desc(Comment.commented_at))
        .all()
    )
    return CommentListResponse(comments=[_to_out(comment) for comment in comments])


@router.post("", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(
    slug: str,
    payload: CommentCreate,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> CommentOut:
    """Add a comment to a post.

    Args:
        slug: Post slug
        payload: Comment text
        db: Database session
        current_user: Authenticated user

    Returns:
        The stored comment

    Raises:
        HTTPException: 400 for a blank or overlong comment, 404 for an unknown slug
    """
    post = get_post_or_404(db, slug, include_drafts=False)
    text = payload.comment.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment is required")
    if len(text) > MAX_COMMENT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Comment must be at most {MAX_COMMENT_LENGTH} characters",
        )

    comment = Comment(post_id=post.id, user_id=current_user.id, content=text)
    db.add(comment)
    db.execute(
        update(Post)
        .where(Post.id == post.id)
        .values(total_comments=Post.total_comments + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(comment)
    return _to_out(comment)
